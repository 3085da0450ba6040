"""Oregon liquor search notification service."""

__version__ = "0.1.0"
