"""tabscribe: guitar tablature notation engine."""

__version__ = "0.1.0"
