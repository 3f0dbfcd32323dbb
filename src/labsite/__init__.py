"""Lab site content service."""

__version__ = "1.0.0"
