"""Tests for ``shiftline.fleet.gps`` -- in-memory GPS driver registry."""

from __future__ import annotations

import threading

import pytest

from shiftline.core.errors import DriverAlreadyActiveError, DriverNotFoundError
from shiftline.fleet.gps import DriverPosition, GPSModule, InMemoryGPSModule


class TestInMemoryGPSModule:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryGPSModule(), GPSModule)

    def test_create_starts_at_origin(self):
        gps = InMemoryGPSModule()
        position = gps.create_driver("d1")
        assert position == DriverPosition(driver_id="d1", latitude=0.0, longitude=0.0)
        assert gps.get_driver("d1") is position

    def test_create_twice_fails(self):
        gps = InMemoryGPSModule()
        gps.create_driver("d1")
        with pytest.raises(DriverAlreadyActiveError):
            gps.create_driver("d1")

    def test_delete(self):
        gps = InMemoryGPSModule()
        gps.create_driver("d1")
        gps.delete_driver("d1")
        assert gps.get_driver("d1") is None
        assert len(gps) == 0

    def test_delete_unknown_fails(self):
        with pytest.raises(DriverNotFoundError):
            InMemoryGPSModule().delete_driver("ghost")

    def test_update_position(self):
        gps = InMemoryGPSModule()
        gps.create_driver("d1")
        position = gps.update_position("d1", 22.3, 114.1)
        assert (position.latitude, position.longitude) == (22.3, 114.1)

    def test_update_unknown_fails(self):
        with pytest.raises(DriverNotFoundError):
            InMemoryGPSModule().update_position("ghost", 1.0, 1.0)

    def test_concurrent_create_only_one_wins(self):
        gps = InMemoryGPSModule()
        outcomes: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            try:
                gps.create_driver("d1")
                result = "created"
            except DriverAlreadyActiveError:
                result = "rejected"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("created") == 1
        assert gps.active_drivers() == ["d1"]
