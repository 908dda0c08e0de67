"""Shared infrastructure — structured logging.

This package is framework-agnostic. It must NEVER import from ``sdk/`` or ``polling/``.
"""

from core.logger import DakiyaLogger

__all__ = [
    "DakiyaLogger",
]
