"""Content tooling for the キッズグッズラボ affiliate site."""

__version__ = "0.1.0"
