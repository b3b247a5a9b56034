"""Core utilities: errors, logging, formatting."""
