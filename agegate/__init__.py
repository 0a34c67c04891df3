"""Age verification billing server."""

__version__ = "1.0.0"
