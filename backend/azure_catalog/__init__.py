"""Azure pricing catalog sync."""

__version__ = "0.1.0"
