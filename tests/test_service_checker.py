import asyncio
import subprocess

import pytest

from monitor_server.models.errors import SourceError, SourceErrorKind
from monitor_server.services import service_checker


def _only_cron_active(service, timeout_seconds=5.0):
    return "active" if service == "cron" else "inactive"


def _check(services):
    return asyncio.run(service_checker.check_services_async(services))


def test_check_services_keeps_configured_order(monkeypatch):
    monkeypatch.setattr(service_checker, "query_service_state", _only_cron_active)

    result = _check(["ssh", "cron", "nginx"])

    assert [(a.service, a.is_active) for a in result] == [
        ("ssh", False),
        ("cron", True),
        ("nginx", False),
    ]


def test_duplicate_services_keep_first_occurrence(monkeypatch):
    queried = []

    def fake_query(service, timeout_seconds=5.0):
        queried.append(service)
        return _only_cron_active(service)

    monkeypatch.setattr(service_checker, "query_service_state", fake_query)

    result = _check(["cron", "ssh", "cron"])

    assert [(a.service, a.is_active) for a in result] == [("cron", True), ("ssh", False)]
    assert sorted(queried) == ["cron", "ssh"]


def test_only_exact_active_counts(monkeypatch):
    answers = {"a": "active", "b": "Active", "c": "activating", "d": "failed", "e": ""}
    monkeypatch.setattr(
        service_checker,
        "query_service_state",
        lambda service, timeout_seconds=5.0: answers[service],
    )

    result = _check(list(answers))

    assert [a.is_active for a in result] == [True, False, False, False, False]


def test_query_trims_systemctl_output(monkeypatch):
    def fake_run(cmd, **kwargs):
        assert cmd == ["systemctl", "is-active", "ssh"]
        return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="active\n", stderr="")

    monkeypatch.setattr("monitor_server.services.service_checker.subprocess.run", fake_run)

    assert service_checker.query_service_state("ssh") == "active"
    assert service_checker.is_service_active("ssh") is True


def test_non_utf8_systemctl_output_is_decoded_lossily(monkeypatch):
    def fake_run(cmd, **kwargs):
        assert kwargs["errors"] == "replace"
        stdout = b"act\xffive\n".decode("utf-8", errors=kwargs["errors"])
        return subprocess.CompletedProcess(args=cmd, returncode=3, stdout=stdout, stderr="")

    monkeypatch.setattr("monitor_server.services.service_checker.subprocess.run", fake_run)

    assert service_checker.query_service_state("ssh") == "act\ufffdive"
    assert service_checker.is_service_active("ssh") is False


def test_undecodable_systemctl_output_means_inactive(monkeypatch):
    def fake_run(*args, **kwargs):
        raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

    monkeypatch.setattr("monitor_server.services.service_checker.subprocess.run", fake_run)

    with pytest.raises(SourceError) as excinfo:
        service_checker.query_service_state("ssh")
    assert excinfo.value.kind is SourceErrorKind.SERVICE_MANAGER
    assert service_checker.is_service_active("ssh") is False


def test_missing_systemctl_means_inactive(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("systemctl not found")

    monkeypatch.setattr("monitor_server.services.service_checker.subprocess.run", fake_run)

    assert service_checker.is_service_active("ssh") is False
    with pytest.raises(SourceError) as excinfo:
        service_checker.query_service_state("ssh")
    assert excinfo.value.kind is SourceErrorKind.SERVICE_MANAGER


def test_load_service_names_from_toml(tmp_path):
    path = tmp_path / "services.toml"
    path.write_text('services = ["ssh", "cron", "nginx", "", 42]\n')

    assert service_checker.load_service_names(str(path)) == ["ssh", "cron", "nginx"]


def test_load_service_names_missing_or_broken_file(tmp_path):
    assert service_checker.load_service_names(str(tmp_path / "missing.toml")) == []

    broken = tmp_path / "broken.toml"
    broken.write_text("services = [\n")
    assert service_checker.load_service_names(str(broken)) == []

    wrong_type = tmp_path / "wrong.toml"
    wrong_type.write_text('services = "ssh"\n')
    assert service_checker.load_service_names(str(wrong_type)) == []
