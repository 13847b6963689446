"""Solitaire move validation, state transitions and undo history."""
