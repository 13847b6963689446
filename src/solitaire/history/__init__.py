"""Undo/redo history."""
