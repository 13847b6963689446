"""Card types and deck construction."""
