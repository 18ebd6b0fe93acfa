"""Core building blocks: reserved names, path validation, settings and state."""
