"""Timestamped video annotation over Gemini function calling."""

__version__ = "0.1.0"
