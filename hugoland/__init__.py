"""
Hugoland - Idle quiz-RPG state engine

A deterministic engine for one player's progression in a quiz-driven
RPG. It provides:
- Derived stat resolution across equipment, relics, garden, buffs and modes
- Question-driven combat with adventure skills and revival fallbacks
- Chest and drop rolls
- Offline catch-up for idle systems
- Snapshot persistence, sessions and an HTTP API
"""

__version__ = "0.1.0"
