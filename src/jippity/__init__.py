"""Jippity - a language model that plays games over the game API."""

from .core import SessionHandler

__version__ = "0.1.0"

__all__ = ["SessionHandler"]
