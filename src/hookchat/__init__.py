"""hookchat - a terminal chat client for webhook-backed agents."""

__version__ = "0.1.0"
