"""A wave-based arcade space shooter with power-ups, bombs and a highscore table."""

__version__ = "0.1.0"