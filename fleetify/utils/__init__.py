"""
Utilities package for the fleetify migration toolkit.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of migration-specific logic.
"""

from fleetify.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
