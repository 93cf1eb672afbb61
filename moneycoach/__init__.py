"""Money Coach: expense tracking with a witty AI money coach."""

__version__ = "0.1.0"
