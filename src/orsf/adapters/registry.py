"""Keyed table of adapters guarded by a single lock."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from .base import Adapter

__all__ = ["AdapterRegistrationError", "AdapterRegistry"]

logger = logging.getLogger(__name__)


class AdapterRegistrationError(ValueError):
    """Raised when an adapter cannot be added to a registry."""


class AdapterRegistry:
    """Adapters keyed by ``(id, version, car_key)``.

    Registries are plain objects owned by the caller; there is no process
    wide instance. Every public method takes the same lock, so concurrent
    callers observe a consistent list.
    """

    def __init__(self) -> None:
        self._adapters: List[Adapter] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._adapters)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return any(adapter.metadata.key == key for adapter in self._adapters)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def register(self, adapter: Adapter) -> Adapter:
        """Add ``adapter``; its ``(id, version, car_key)`` must be unused."""

        key = adapter.metadata.key
        with self._lock:
            if any(existing.metadata.key == key for existing in self._adapters):
                raise AdapterRegistrationError(
                    "adapter '{}' version '{}' for car '{}' is already registered".format(*key)
                )
            self._adapters.append(adapter)
        logger.info("Registered adapter '%s' version '%s' for car '%s'", *key)
        return adapter

    def unregister(self, id: str, version: str, car_key: str) -> bool:
        """Remove the adapter with exactly this key; return whether one was removed."""

        key = (id, version, car_key)
        with self._lock:
            remaining = [adapter for adapter in self._adapters if adapter.metadata.key != key]
            removed = len(remaining) != len(self._adapters)
            self._adapters = remaining
        if removed:
            logger.info("Unregistered adapter '%s' version '%s' for car '%s'", *key)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._adapters.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def resolve(self, id: str, version: str = "", car_key: str = "") -> Optional[Adapter]:
        """Return the best adapter for ``id``.

        Blank ``version`` or ``car_key`` match anything. When nothing matches
        exactly, the first adapter registered for ``id`` is returned.
        """

        with self._lock:
            for adapter in self._adapters:
                metadata = adapter.metadata
                if (
                    metadata.id == id
                    and (not version or metadata.version == version)
                    and (not car_key or metadata.car_key == car_key)
                ):
                    return adapter
            for adapter in self._adapters:
                if adapter.metadata.id == id:
                    return adapter
        return None

    def adapters(self) -> Tuple[Adapter, ...]:
        """Snapshot of every registered adapter in registration order."""

        with self._lock:
            return tuple(self._adapters)

    def adapters_for_game(self, id: str) -> Tuple[Adapter, ...]:
        with self._lock:
            return tuple(adapter for adapter in self._adapters if adapter.metadata.id == id)
