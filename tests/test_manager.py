import pytest

from conftest import StubTester
from netgauge.measurements.manager import MeasurementManager
from netgauge.measurements.models import AllProbesFailedError


@pytest.fixture
def stub_tester():
    return StubTester()


@pytest.fixture
def manager(stub_tester):
    return MeasurementManager(stub_tester)


def test_nothing_recorded_before_first_run(manager):
    assert manager.latest() is None
    assert manager.status() is None
    assert manager.to_dict() == {"result": None, "quality": None, "running": False}


def test_run_records_latest(manager, stub_tester):
    quality = manager.run_speedtest()

    assert quality.tier == "excellent"
    assert manager.latest() is stub_tester.result
    payload = manager.to_dict()
    assert payload["result"]["timestamp"] == "2024-05-01T12:00:00+00:00"
    assert payload["quality"]["tier"] == "excellent"
    assert payload["running"] is False


def test_failed_run_keeps_previous_result(manager, stub_tester):
    manager.run_speedtest()
    stub_tester.fail = True

    with pytest.raises(AllProbesFailedError):
        manager.run_speedtest()

    assert manager.latest() is stub_tester.result
    assert not manager.busy


def test_status_uses_cached_provider(manager, stub_tester):
    manager.run_speedtest()

    first = manager.status()
    second = manager.status()

    assert first.to_dict() == {"is_good": True, "quality": "excellent", "speed": 60.0, "provider": "MTN"}
    assert second == first
    assert stub_tester.provider_calls == 1


def test_refresh_provider_queries_again(manager, stub_tester):
    manager.provider()
    manager.refresh_provider()

    assert stub_tester.provider_calls == 2
