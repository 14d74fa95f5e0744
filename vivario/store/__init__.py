"""Vivario Session Store"""

from .memory import SessionStore, get_store, reset_store

__all__ = [
    "SessionStore",
    "get_store",
    "reset_store",
]
