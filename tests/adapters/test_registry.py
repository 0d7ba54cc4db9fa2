from __future__ import annotations

import threading

import pytest

from orsf.adapters import AdapterMetadata, AdapterRegistrationError, AdapterRegistry, ini_adapter
from tests.helpers import build_sample_mappings


def _adapter(id: str, version: str = "", car_key: str = ""):
    return ini_adapter(AdapterMetadata(id, version, car_key, file_extension="ini"), build_sample_mappings())


def test_register_and_resolve_with_wildcards() -> None:
    registry = AdapterRegistry()
    gt3 = registry.register(_adapter("game", "1.0", "gt3"))
    gt4 = registry.register(_adapter("game", "1.0", "gt4"))
    assert len(registry) == 2
    assert ("game", "1.0", "gt4") in registry
    assert registry.resolve("game", "1.0", "gt4") is gt4
    assert registry.resolve("game", car_key="gt4") is gt4
    assert registry.resolve("game") is gt3


def test_resolve_falls_back_to_first_adapter_for_id() -> None:
    registry = AdapterRegistry()
    first = registry.register(_adapter("game", "1.0", "gt3"))
    assert registry.resolve("game", "2.0", "lmp2") is first
    assert registry.resolve("other") is None


def test_duplicate_keys_are_rejected() -> None:
    registry = AdapterRegistry()
    registry.register(_adapter("game", "1.0", "gt3"))
    with pytest.raises(AdapterRegistrationError):
        registry.register(_adapter("game", "1.0", "gt3"))
    assert len(registry) == 1


def test_unregister_clear_and_listing() -> None:
    registry = AdapterRegistry()
    registry.register(_adapter("game", "1.0", "gt3"))
    registry.register(_adapter("other"))
    assert [adapter.metadata.id for adapter in registry.adapters()] == ["game", "other"]
    assert len(registry.adapters_for_game("game")) == 1
    assert registry.unregister("game", "1.0", "gt3")
    assert not registry.unregister("game", "1.0", "gt3")
    registry.clear()
    assert len(registry) == 0


def test_concurrent_registration_keeps_every_adapter() -> None:
    registry = AdapterRegistry()

    def worker(offset: int) -> None:
        for index in range(25):
            registry.register(_adapter("game", str(offset), str(index)))

    threads = [threading.Thread(target=worker, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(registry) == 100
