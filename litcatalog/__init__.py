"""Personal library catalog backed by the Gutendex API."""

__version__ = "0.1.0"
