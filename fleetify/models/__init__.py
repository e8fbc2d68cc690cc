"""
Table models for the fleetify procurement schema.

Each model module may define ``register(registry)`` to add its seed generator.
Nothing registers on import: the CLI calls `register_seeders` once at start-up
so registration order stays visible.
"""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from fleetify.errors import ModelLoadError
from fleetify.models.base import TableModel, db_field
from fleetify.utils.logging import get_logger

if TYPE_CHECKING:
    from fleetify.migration.registry import SeedRegistry

log = get_logger(__name__)

_SKIPPED_MODULES = {"base"}


def model_modules() -> List[str]:
    """Names of the model modules in this package."""
    package_dir = Path(__file__).parent
    return sorted(
        name
        for _, name, is_pkg in pkgutil.iter_modules([str(package_dir)])
        if not is_pkg and name not in _SKIPPED_MODULES and not name.startswith("_")
    )


def register_seeders(registry: Optional[SeedRegistry] = None) -> List[str]:
    """
    Import every model module and call its ``register(registry)`` hook.

    Returns the names of the modules that registered a seed generator.
    Raises `ModelLoadError` when a model module fails to import.
    """
    from fleetify.migration.registry import registry as default_registry

    target = registry or default_registry
    registered: List[str] = []
    for name in model_modules():
        try:
            module = importlib.import_module(f"{__name__}.{name}")
        except Exception as exc:
            raise ModelLoadError(f"failed to load model module {name}: {exc}") from exc
        hook = getattr(module, "register", None)
        if callable(hook):
            hook(target)
            registered.append(name)
    log.debug(f"Seed generators registered for {len(registered)} model(s)", extra={"models": registered})
    return registered


__all__ = ["TableModel", "db_field", "model_modules", "register_seeders"]
