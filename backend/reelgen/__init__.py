"""Meeting highlight reel generation."""

__version__ = "1.0.0"
