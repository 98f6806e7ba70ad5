"""
Worldmap module - module dependency graph for level selection.
"""

from curriculum.worldmap.types import Worldmap, WorldmapNode, WorldmapConnection, WorldmapIcon
from curriculum.worldmap.generator import WorldmapGenerator, generate_worldmap

__all__ = [
    "Worldmap",
    "WorldmapNode",
    "WorldmapConnection",
    "WorldmapIcon",
    "WorldmapGenerator",
    "generate_worldmap",
]
