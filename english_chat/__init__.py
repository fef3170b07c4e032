"""English conversation practice API."""

__version__ = "0.1.0"
