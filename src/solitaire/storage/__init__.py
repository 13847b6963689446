"""Local save slots."""
