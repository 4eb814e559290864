"""Database access and lifecycle."""
