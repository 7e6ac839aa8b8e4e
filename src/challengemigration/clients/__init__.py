"""
Adapters for external directories.
"""

from challengemigration.clients.http import (
    HTTPGroupDirectory,
    HTTPProjectDirectory,
    HTTPTermsCatalog,
    TokenProvider,
)

__all__ = [
    "TokenProvider",
    "HTTPGroupDirectory",
    "HTTPTermsCatalog",
    "HTTPProjectDirectory",
]
