import time
from types import SimpleNamespace

import pytest

from monitor_server.models.errors import SourceError, SourceErrorKind
from monitor_server.services import hardware


def _thermal_zone(root, name, millidegrees):
    zone = root / name
    zone.mkdir()
    (zone / "temp").write_text(f"{millidegrees}\n")


def test_format_uptime():
    assert hardware.format_uptime(0) == "0 days, 0 hours, 0 minutes"
    assert hardware.format_uptime(59) == "0 days, 0 hours, 0 minutes"
    assert hardware.format_uptime(90061) == "1 days, 1 hours, 1 minutes"


def test_get_uptime_uses_boot_time(monkeypatch):
    boot_time = time.time() - (2 * 86400 + 3 * 3600 + 4 * 60 + 30)
    monkeypatch.setattr(hardware.psutil, "boot_time", lambda: boot_time)
    assert hardware.get_uptime() == "2 days, 3 hours, 4 minutes"


def test_temperature_averages_all_zones(tmp_path, monkeypatch):
    _thermal_zone(tmp_path, "thermal_zone0", 40000)
    _thermal_zone(tmp_path, "thermal_zone1", 45000)
    # cooling devices have no temp file and must be ignored
    (tmp_path / "cooling_device0").mkdir()
    monkeypatch.setattr(hardware, "THERMAL_ROOT", tmp_path)

    assert hardware.get_temperature() == "42.50 °C"


def test_temperature_without_thermal_subsystem_is_not_an_error(tmp_path, monkeypatch):
    monkeypatch.setattr(hardware, "THERMAL_ROOT", tmp_path / "missing")
    assert hardware.get_temperature() == hardware.TEMPERATURE_UNAVAILABLE


def test_temperature_without_readings(tmp_path, monkeypatch):
    (tmp_path / "cooling_device0").mkdir()
    monkeypatch.setattr(hardware, "THERMAL_ROOT", tmp_path)
    assert hardware.get_temperature() == hardware.TEMPERATURE_UNAVAILABLE


def test_system_version_from_os_release(tmp_path, monkeypatch):
    os_release = tmp_path / "os-release"
    os_release.write_text('NAME="Debian GNU/Linux"\nPRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\n')
    monkeypatch.setattr(hardware, "OS_RELEASE_PATH", os_release)

    assert hardware.get_system_version() == "Debian GNU/Linux 12 (bookworm)"


def test_system_version_missing_pretty_name(tmp_path, monkeypatch):
    os_release = tmp_path / "os-release"
    os_release.write_text("NAME=Foo\n")
    monkeypatch.setattr(hardware, "OS_RELEASE_PATH", os_release)

    with pytest.raises(SourceError) as excinfo:
        hardware.get_system_version()
    assert excinfo.value.kind is SourceErrorKind.SYSTEM_VERSION


def test_system_version_non_utf8_os_release(tmp_path, monkeypatch):
    os_release = tmp_path / "os-release"
    os_release.write_bytes(b'PRETTY_NAME="Caf\xe9 OS"\n')
    monkeypatch.setattr(hardware, "OS_RELEASE_PATH", os_release)

    with pytest.raises(SourceError) as excinfo:
        hardware.get_system_version()
    assert excinfo.value.kind is SourceErrorKind.SYSTEM_VERSION


def test_memory_info_is_used_and_total(monkeypatch):
    monkeypatch.setattr(
        hardware.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(total=8 * 1024**3, available=3 * 1024**3),
    )
    assert hardware.get_memory_info() == (5 * 1024**3, 8 * 1024**3)


def test_memory_failure_is_typed(monkeypatch):
    def broken():
        raise OSError("no /proc/meminfo")

    monkeypatch.setattr(hardware.psutil, "virtual_memory", broken)

    with pytest.raises(SourceError) as excinfo:
        hardware.get_memory_info()
    assert excinfo.value.kind is SourceErrorKind.MEMORY


def test_disk_info_for_missing_path(tmp_path):
    with pytest.raises(SourceError) as excinfo:
        hardware.get_disk_info(str(tmp_path / "nope"))
    assert excinfo.value.kind is SourceErrorKind.DISK


def test_disk_info_is_available_and_total(tmp_path):
    available, total = hardware.get_disk_info(str(tmp_path))
    assert 0 <= available <= total


def test_network_traffic_sums_counters(monkeypatch):
    monkeypatch.setattr(
        hardware.psutil,
        "net_io_counters",
        lambda: SimpleNamespace(bytes_recv=1234, bytes_sent=567),
    )
    assert hardware.get_network_traffic() == (1234, 567)


def test_network_traffic_without_interfaces(monkeypatch):
    monkeypatch.setattr(hardware.psutil, "net_io_counters", lambda: None)
    with pytest.raises(SourceError) as excinfo:
        hardware.get_network_traffic()
    assert excinfo.value.kind is SourceErrorKind.NETWORK


def test_hostname_is_not_empty():
    assert hardware.get_hostname().strip() != ""
