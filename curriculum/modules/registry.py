"""
Module registry - explicit, injectable store of module definitions.

Every service receives the registry it works on; there is no process-wide
instance, so tests build isolated registries.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol

from progression.core.errors import UnknownModuleError
from curriculum.modules.definition import ModuleDefinition

logger = logging.getLogger(__name__)


class TaskOwnershipResolver(Protocol):
    """Maps a task id to the module that declares it."""

    def find_task_module(self, task_id: str) -> Optional[str]: ...


class ModuleRegistry:
    """
    Registered modules in registration order.

    Usage:
        registry = ModuleRegistry([intro, forest])
        registry.get_module("forest")
        registry.find_task_module("gather_wood")  # "forest"
    """

    def __init__(self, modules: Iterable[ModuleDefinition] = ()):
        self._modules: dict[str, ModuleDefinition] = {}
        for module in modules:
            self.register(module)

    def register(self, module: ModuleDefinition) -> None:
        """Register a module; re-registering an id replaces it in place."""
        if module.id in self._modules:
            logger.warning("Module %s registered twice; replacing", module.id)
        self._modules[module.id] = module

    def unregister(self, module_id: str) -> None:
        self._modules.pop(module_id, None)

    def clear(self) -> None:
        self._modules.clear()

    def get_module(self, module_id: str) -> Optional[ModuleDefinition]:
        return self._modules.get(module_id)

    def require_module(self, module_id: str) -> ModuleDefinition:
        """Like get_module, but raises UnknownModuleError."""
        module = self._modules.get(module_id)
        if module is None:
            raise UnknownModuleError(module_id)
        return module

    def get_registered_module_ids(self) -> list[str]:
        return list(self._modules)

    def find_task_module(self, task_id: str) -> Optional[str]:
        """First module, in registration order, declaring the task."""
        for module in self._modules.values():
            if module.get_task(task_id) is not None:
                return module.id
        return None

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[ModuleDefinition]:
        return iter(list(self._modules.values()))

    def __len__(self) -> int:
        return len(self._modules)
