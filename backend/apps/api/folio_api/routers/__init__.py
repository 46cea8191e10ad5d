"""
API router modules.

This package contains all API route handlers organized by domain.
"""

from . import content, translate, translations

__all__ = [
    "content",
    "translate",
    "translations",
]
