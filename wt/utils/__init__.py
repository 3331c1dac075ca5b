"""Utility functions for wt.

- paths: path containment checks
"""

from .paths import contains_path

__all__ = [
    "contains_path",
]
