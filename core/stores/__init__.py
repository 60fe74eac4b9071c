# core/stores/__init__.py
"""
Reactive stores package.

Each store mirrors one remote collection or value. Collections are never
patched in place: every successful mutation is followed by a full reload.
"""

__all__ = []
