"""Food delivery backend: customer and staff authentication core."""

__version__ = "1.0.0"
