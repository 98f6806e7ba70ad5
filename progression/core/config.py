"""
Engine configuration.

A plain keyword-default configuration object shared by every service.
"""

from __future__ import annotations

from typing import Optional, Sequence


class EngineConfig:
    """Configuration for the progression engine."""

    def __init__(
        self,
        initially_unlocked: Optional[Sequence[str]] = None,
        default_unlocked_count: int = 2,
        custom_check_timeout: Optional[float] = 5.0,
        choice_label_max_length: int = 50,
        root_greeting: str = "Hello! What would you like to do?",
        talk_text_template: str = "Talk to {name}...",
        goodbye_text: str = "Goodbye",
        active_status_label: str = "In Progress",
    ):
        # Manual allow-list; None selects the first-N fallback policy
        self.initially_unlocked = list(initially_unlocked) if initially_unlocked is not None else None
        self.default_unlocked_count = default_unlocked_count
        # Seconds; None waits forever
        self.custom_check_timeout = custom_check_timeout
        self.choice_label_max_length = choice_label_max_length
        self.root_greeting = root_greeting
        self.talk_text_template = talk_text_template
        self.goodbye_text = goodbye_text
        self.active_status_label = active_status_label

    @property
    def uses_manual_unlock(self) -> bool:
        """True when an explicit allow-list of unlocked modules is configured."""
        return bool(self.initially_unlocked)
