"""State serialization and share codes."""
