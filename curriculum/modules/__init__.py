"""
Modules module - definitions, registry, context, progression and loading.
"""

from curriculum.modules.definition import (
    NPC,
    WorldObject,
    Interactable,
    Manifest,
    ModuleConfig,
    ModuleDefinition,
    Position,
    WorldmapPlacement,
    define_module,
)
from curriculum.modules.registry import ModuleRegistry
from curriculum.modules.handlers import HandlerRegistry
from curriculum.modules.context import ModuleContext
from curriculum.modules.progression import (
    ModuleProgressionService,
    UnlockCheck,
    UnlockResult,
    CompletionCheck,
    InitializationActions,
)
from curriculum.modules.loader import ModuleLoader, load_content

__all__ = [
    "NPC",
    "WorldObject",
    "Interactable",
    "Manifest",
    "ModuleConfig",
    "ModuleDefinition",
    "Position",
    "WorldmapPlacement",
    "define_module",
    "ModuleRegistry",
    "HandlerRegistry",
    "ModuleContext",
    "ModuleProgressionService",
    "UnlockCheck",
    "UnlockResult",
    "CompletionCheck",
    "InitializationActions",
    "ModuleLoader",
    "load_content",
]
