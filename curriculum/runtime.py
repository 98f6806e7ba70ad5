"""
Curriculum runtime - wires the registry, stores and services together.

The Curriculum class is the main entry point for a session. It owns:
- The module registry and handler registry
- The progress and progression stores
- The requirement evaluator and task availability
- Module progression, task and dialogue services
- An optional event bus shared by all of them

Usage:
    curriculum = Curriculum.from_content("content", handlers)
    await curriculum.initialize()
    session = curriculum.dialogue("forest")
    node = await session.start("guide")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from progression.core.config import EngineConfig
from progression.core.errors import ErrorHandler
from progression.core.events import EventBus
from progression.state.progress import InMemoryProgressStore, ProgressStore
from progression.state.progression import ProgressionStore
from curriculum.dialogue.resolver import DialogueResolver
from curriculum.dialogue.session import DialogueSession
from curriculum.modules.context import ModuleContext
from curriculum.modules.handlers import HandlerRegistry
from curriculum.modules.loader import load_content
from curriculum.modules.progression import InitializationActions, ModuleProgressionService
from curriculum.modules.registry import ModuleRegistry
from curriculum.tasks.availability import TaskAvailabilityService
from curriculum.tasks.service import TaskService
from curriculum.unlock.evaluator import RequirementEvaluator
from curriculum.worldmap.generator import WorldmapGenerator
from curriculum.worldmap.types import Worldmap

logger = logging.getLogger(__name__)


class Curriculum:
    """A learning session over a set of registered modules."""

    def __init__(
        self,
        registry: Optional[ModuleRegistry] = None,
        config: Optional[EngineConfig] = None,
        progress: Optional[ProgressStore] = None,
        progression: Optional[ProgressionStore] = None,
        handlers: Optional[HandlerRegistry] = None,
        events: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.registry = registry if registry is not None else ModuleRegistry()
        self.config = config or EngineConfig()
        self.progress = progress if progress is not None else InMemoryProgressStore()
        self.progression = progression if progression is not None else ProgressionStore()
        self.handlers = handlers or HandlerRegistry()
        self.events = events if events is not None else EventBus()
        self.error_handler = error_handler

        # Services
        self.evaluator = RequirementEvaluator(
            self.progress,
            self.progression,
            ownership=self.registry,
            config=self.config,
            error_handler=error_handler,
        )
        self.availability = TaskAvailabilityService(self.evaluator, self.progress)
        self.modules = ModuleProgressionService(
            self.registry,
            self.progression,
            self.progress,
            self.evaluator,
            config=self.config,
            events=self.events,
        )
        self.tasks = TaskService(
            self.registry,
            self.progress,
            self.availability,
            modules=self.modules,
            events=self.events,
            error_handler=error_handler,
        )
        self.resolver = DialogueResolver(self.availability, self.config, error_handler)
        self.worldmap = WorldmapGenerator(self.registry, self.progression)

    @classmethod
    def from_content(
        cls,
        data_path: Path | str,
        handlers: Optional[HandlerRegistry] = None,
        config: Optional[EngineConfig] = None,
    ) -> Curriculum:
        """Build a curriculum from a content directory of module JSON files."""
        handlers = handlers or HandlerRegistry()
        registry = ModuleRegistry()
        loaded = load_content(str(data_path), registry, handlers)
        logger.info(f"Curriculum loaded {len(loaded)} modules from {data_path}")
        return cls(registry=registry, config=config, handlers=handlers)

    async def initialize(self, module_ids: Optional[Sequence[str]] = None) -> InitializationActions:
        """Apply the initial unlock policy."""
        return await self.modules.initialize(module_ids)

    def context(self, module_id: str) -> ModuleContext:
        """
        Context bound to a module.

        Raises:
            UnknownModuleError: the module is not registered
        """
        return ModuleContext(
            module=self.registry.require_module(module_id),
            progress=self.progress,
            evaluator=self.evaluator,
            handlers=self.handlers,
            events=self.events,
        )

    def dialogue(self, module_id: str) -> DialogueSession:
        """A dialogue session for one module's NPCs."""
        return DialogueSession(
            self.context(module_id),
            self.resolver,
            modules=self.modules,
            events=self.events,
            error_handler=self.error_handler,
        )

    def generate_worldmap(self, module_ids: Optional[Sequence[str]] = None) -> Worldmap:
        """Worldmap for the given modules, or every registered one."""
        ids = list(module_ids) if module_ids is not None else self.registry.get_registered_module_ids()
        return self.worldmap.generate(ids)
