"""alrm - how long until a time of day, in your terminal."""

__version__ = "0.3.0"
