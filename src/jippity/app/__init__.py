"""Application runtime package."""

from jippity.app.runtime import AppRuntime

__all__ = ["AppRuntime"]
