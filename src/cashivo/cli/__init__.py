"""CLI layer for cashivo."""
