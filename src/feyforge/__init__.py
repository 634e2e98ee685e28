"""feyforge - 5e character and combat rules engine."""

__version__ = "0.1.0"
