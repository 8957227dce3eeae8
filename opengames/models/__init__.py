"""
Models package

- game.py: Game (table `games`)
- category.py: CategoryRecord (table `categories`), used by the `source=db` categories mode
"""

from .game import Game
from .category import CategoryRecord

__all__ = [
    "Game",
    "CategoryRecord",
]
