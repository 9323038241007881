"""Repository state resolution engine."""
