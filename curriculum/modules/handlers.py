"""
Handler registry - named custom checks and dialogue actions.

JSON content cannot hold callables, so it references them by id. A
registry instance is built per game (or per test) and handed to the
content loader and the module contexts.

Usage:
    handlers = HandlerRegistry()

    @handlers.check("has_lantern")
    def has_lantern(ctx):
        return ctx.get_state("lantern") is True

    @handlers.action("light_lantern")
    async def light_lantern(ctx):
        ctx.set_state("lit", True)
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from progression.core.errors import HandlerNotFoundError
from curriculum.dialogue.actions import DialogueAction, as_action
from curriculum.unlock.requirements import CustomCheck, FunctionCheck


class HandlerRegistry:
    """Maps string ids to CustomCheck and DialogueAction objects."""

    def __init__(self):
        self._checks: dict[str, CustomCheck] = {}
        self._actions: dict[str, DialogueAction] = {}

    def register_check(self, check_id: str, check: Union[CustomCheck, Callable[[Any], Any]]) -> CustomCheck:
        if not isinstance(check, CustomCheck):
            check = FunctionCheck(check, check_id=check_id)
        elif check.check_id is None:
            check.check_id = check_id
        self._checks[check_id] = check
        return check

    def register_action(self, action_id: str, action: Union[DialogueAction, Callable[[Any], Any]]) -> DialogueAction:
        action = as_action(action)
        self._actions[action_id] = action
        return action

    def check(self, check_id: str) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
        """Decorator registering a predicate function."""
        def decorator(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.register_check(check_id, func)
            return func
        return decorator

    def action(self, action_id: str) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
        """Decorator registering an action function."""
        def decorator(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.register_action(action_id, func)
            return func
        return decorator

    def get_check(self, check_id: str) -> CustomCheck:
        check = self._checks.get(check_id)
        if check is None:
            raise HandlerNotFoundError(f"No check registered as '{check_id}'", context={"handler_id": check_id})
        return check

    def get_action(self, action_id: str) -> DialogueAction:
        action = self._actions.get(action_id)
        if action is None:
            raise HandlerNotFoundError(f"No action registered as '{action_id}'", context={"handler_id": action_id})
        return action

    def find_check(self, check_id: str) -> Optional[CustomCheck]:
        return self._checks.get(check_id)

    def find_action(self, action_id: str) -> Optional[DialogueAction]:
        return self._actions.get(action_id)

    def has_check(self, check_id: str) -> bool:
        return check_id in self._checks

    def has_action(self, action_id: str) -> bool:
        return action_id in self._actions
