"""
Content model base class for authored, immutable data.

Content models are pure data containers with NO progress state.
Runtime status (task active/completed, module unlocked) always
derives from the progress stores, never from a field on the model.

Usage:
    class Manifest(ContentModel):
        id: str
        name: str
        summary: str = ""
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class ContentModel(BaseModel):
    """
    Base class for all authored content.

    Content is validated by Pydantic and frozen after construction:
    - Automatic validation
    - JSON serialization (for everything that is not a handler object)
    - Hashable, immutable values
    """

    model_config = ConfigDict(
        # Handler objects (custom checks, dialogue actions) are stored by reference
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )

    # Class variable: content kind name (used in error messages and schemas)
    _kind_name: ClassVar[str] = ""

    @classmethod
    def get_kind_name(cls) -> str:
        """Get the content kind name."""
        return cls._kind_name or cls.__name__

    def replace(self, **changes: Any) -> ContentModel:
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)
