"""
Curriculum framework.

Provides the learning-progression domain built on the progression core:
- Unlock requirements and their evaluation
- Tasks (definitions, validators, availability, submission)
- Dialogue (trees, conditions, actions, root menus, sessions)
- Modules (definitions, registry, context, progression, JSON loading)
- Worldmap (dependency graph and layout)
"""

from curriculum.runtime import Curriculum

__all__ = ["Curriculum"]
