"""ProductFlow: AI-assisted product discovery backend."""

__version__ = "0.1.0"
