"""
Resources module - JSON content loading and validation.
"""

from progression.resources.database import ContentDatabase, BUNDLED_SCHEMA_DIR

__all__ = [
    "ContentDatabase",
    "BUNDLED_SCHEMA_DIR",
]
