"""
Input module - pointer and keyboard gestures on items.
"""

from tierlist.input.handler import InputHandler, ItemHit, GestureState

__all__ = [
    "InputHandler",
    "ItemHit",
    "GestureState",
]
