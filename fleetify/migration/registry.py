"""
Seed registry - process-wide mapping of model name to seed generator.

Model modules register their generator explicitly at start-up (see
`fleetify.models.register_seeders`). Registration takes an exclusive lock;
lookups share a read lock so concurrent seeding never blocks on each other.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

from fleetify.utils.logging import get_logger

log = get_logger(__name__)

SeedGenerator = Callable[[], Sequence[Any]]


class ReadWriteLock:
    """
    Many readers or one writer.

    Writers wait for active readers to drain; new readers wait while a writer
    holds or is waiting for the lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Generator[None, None, None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Generator[None, None, None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SeedRegistry:
    """
    Thread-safe registry of seed generators keyed by PascalCase model name.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._generators: Dict[str, SeedGenerator] = {}

    def register(self, model_name: str, generator: SeedGenerator) -> None:
        """Insert or replace the generator for `model_name`."""
        with self._lock.write():
            if model_name in self._generators:
                log.warning(f"Seed generator for {model_name} replaced", extra={"model": model_name})
            self._generators[model_name] = generator
        log.debug(f"Seed generator registered: {model_name}", extra={"model": model_name})

    def resolve(self, model_name: str) -> Optional[SeedGenerator]:
        """Return the generator for `model_name`, or None if unregistered."""
        with self._lock.read():
            return self._generators.get(model_name)

    def names(self) -> List[str]:
        with self._lock.read():
            return sorted(self._generators)

    def clear(self) -> None:
        """Remove every registration (for testing)."""
        with self._lock.write():
            self._generators.clear()


# Global registry instance
registry = SeedRegistry()


def register_seeder(model_name: str, generator: SeedGenerator) -> None:
    """Register a generator on the process-wide registry."""
    registry.register(model_name, generator)


__all__ = [
    "ReadWriteLock",
    "SeedGenerator",
    "SeedRegistry",
    "register_seeder",
    "registry",
]
