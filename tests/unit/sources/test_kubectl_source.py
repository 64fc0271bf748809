"""Tests for the kubectl-backed snapshot source."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from kube_job_exporter.errors import SourceUnavailableError
from kube_job_exporter.sources import KubectlJobSource
from kube_job_exporter.utils import safe_subprocess
from kube_job_exporter.utils.safe_subprocess import UnsafeSubprocessError, normalize_command, resolve_executable
from tests.factories.jobs import job_manifest


def _completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=["kubectl"], returncode=returncode, stdout=stdout, stderr=stderr)


def _patch_run(monkeypatch: pytest.MonkeyPatch, result=None, exc: Exception | None = None) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(self, command):
        calls.append(list(command))
        if exc is not None:
            raise exc
        return result

    monkeypatch.setattr(KubectlJobSource, "_run", fake_run)
    return calls


def test_build_command_lists_all_namespaces_by_default() -> None:
    source = KubectlJobSource(timeout=12.5)

    assert source.build_command() == [
        "kubectl",
        "get",
        "jobs",
        "--output=json",
        "--all-namespaces",
        "--request-timeout=12s",
    ]


def test_build_command_scopes_namespace_and_context() -> None:
    source = KubectlJobSource(
        kubectl_path="/usr/local/bin/kubectl",
        namespace="batch",
        context="prod",
        kubeconfig="/etc/kube/config",
        timeout=0.5,
    )

    assert source.build_command() == [
        "/usr/local/bin/kubectl",
        "get",
        "jobs",
        "--output=json",
        "--namespace=batch",
        "--context=prod",
        "--kubeconfig=/etc/kube/config",
        "--request-timeout=1s",
    ]


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        KubectlJobSource(timeout=0)


def test_list_parses_kubectl_output(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = json.dumps({"items": [job_manifest(name="job1-1"), job_manifest(name="job1-2", active=1, completion=None)]})
    calls = _patch_run(monkeypatch, result=_completed(payload))

    snapshots = KubectlJobSource().list()

    assert [s.name for s in snapshots] == ["job1-1", "job1-2"]
    assert calls and calls[0][:3] == ["kubectl", "get", "jobs"]


def test_non_zero_exit_raises_source_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, result=_completed(returncode=1, stderr="Unable to connect to the server\n"))

    with pytest.raises(SourceUnavailableError, match="Unable to connect") as excinfo:
        KubectlJobSource().list()

    assert excinfo.value.source == "kubectl"


def test_non_zero_exit_without_stderr_reports_status(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, result=_completed(returncode=3))

    with pytest.raises(SourceUnavailableError, match="status 3"):
        KubectlJobSource().list()


@pytest.mark.parametrize(
    "exc",
    [
        subprocess.TimeoutExpired(cmd="kubectl", timeout=1),
        UnsafeSubprocessError("Executable 'kubectl' was not found on PATH."),
        FileNotFoundError("kubectl"),
    ],
)
def test_execution_failures_raise_source_unavailable(monkeypatch: pytest.MonkeyPatch, exc: Exception) -> None:
    _patch_run(monkeypatch, exc=exc)

    with pytest.raises(SourceUnavailableError):
        KubectlJobSource().list()


def test_unparsable_output_raises_source_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, result=_completed("error: not json"))

    with pytest.raises(SourceUnavailableError, match="cannot parse"):
        KubectlJobSource().list()


def test_normalize_command_rejects_control_characters() -> None:
    with pytest.raises(UnsafeSubprocessError):
        normalize_command(["kubectl", "get\njobs"])
    with pytest.raises(UnsafeSubprocessError):
        normalize_command([])


def test_resolve_executable_requires_allow_listed_name(tmp_path: Path) -> None:
    kubectl = tmp_path / "kubectl"
    kubectl.touch()
    other = tmp_path / "sh"
    other.touch()

    assert resolve_executable(kubectl.as_posix(), ["kubectl"]) == kubectl.as_posix()
    with pytest.raises(UnsafeSubprocessError):
        resolve_executable(other.as_posix(), ["kubectl"])


def test_resolve_executable_searches_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    kubectl = tmp_path / "kubectl"
    kubectl.touch()
    monkeypatch.setattr(safe_subprocess.shutil, "which", lambda _: kubectl.as_posix())

    assert resolve_executable("kubectl", ["kubectl"]) == kubectl.as_posix()


def test_resolve_executable_reports_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(safe_subprocess.shutil, "which", lambda _: None)

    with pytest.raises(UnsafeSubprocessError, match="not found"):
        resolve_executable("kubectl", ["kubectl"])


def test_run_validated_command_runs_without_shell(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    kubectl = tmp_path / "kubectl"
    kubectl.touch()
    recorded: dict = {}

    def fake_run(args, **kwargs):
        recorded["args"] = args
        recorded.update(kwargs)
        return _completed("{}")

    monkeypatch.setattr(safe_subprocess.subprocess, "run", fake_run)

    safe_subprocess.run_validated_command([kubectl.as_posix(), "version"], allowed_names=["kubectl"], timeout=3)

    assert recorded["args"] == (kubectl.as_posix(), "version")
    assert recorded["shell"] is False
    assert recorded["timeout"] == 3
    assert recorded["capture_output"] is True
