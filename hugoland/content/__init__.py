"""
Content - Generators, catalogs and achievement evaluators.

The engine consumes these through the ContentProvider interface.
"""

from .provider import ContentProvider, DefaultContent

__all__ = [
    "ContentProvider",
    "DefaultContent",
]
