"""API Routes"""

from . import design, export, health

__all__ = ["design", "export", "health"]
