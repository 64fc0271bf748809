"""Snapshot source backed by ``kubectl get jobs``."""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional

from pydantic import ValidationError

from kube_job_exporter.errors import SourceUnavailableError
from kube_job_exporter.jobs import WorkloadSnapshot
from kube_job_exporter.utils.safe_subprocess import UnsafeSubprocessError, run_validated_command

from .base import SnapshotSource
from .manifest import snapshots_from_list

__all__ = ["KubectlJobSource"]

logger = logging.getLogger(__name__)

_ALLOWED_EXECUTABLES = ("kubectl", "kubectl.exe")


class KubectlJobSource(SnapshotSource):
    """List Jobs through the ``kubectl`` binary.

    Each call is a full list bounded by ``timeout`` seconds, both on the
    subprocess and on the API request itself.
    """

    name = "kubectl"

    def __init__(
        self,
        kubectl_path: str = "kubectl",
        namespace: Optional[str] = None,
        context: Optional[str] = None,
        kubeconfig: Optional[str] = None,
        timeout: float = 20.0,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.kubectl_path = kubectl_path
        self.namespace = namespace
        self.context = context
        self.kubeconfig = kubeconfig
        self.timeout = timeout

    def build_command(self) -> List[str]:
        """Return the argument vector used to list jobs."""
        command = [self.kubectl_path, "get", "jobs", "--output=json"]
        if self.namespace:
            command.append(f"--namespace={self.namespace}")
        else:
            command.append("--all-namespaces")
        if self.context:
            command.append(f"--context={self.context}")
        if self.kubeconfig:
            command.append(f"--kubeconfig={self.kubeconfig}")
        command.append(f"--request-timeout={max(1, int(self.timeout))}s")
        return command

    def _run(self, command: List[str]) -> subprocess.CompletedProcess[str]:
        return run_validated_command(command, allowed_names=_ALLOWED_EXECUTABLES, timeout=self.timeout)

    def list(self) -> List[WorkloadSnapshot]:
        command = self.build_command()
        try:
            result = self._run(command)
        except subprocess.TimeoutExpired as exc:
            raise SourceUnavailableError(f"kubectl timed out after {self.timeout}s", source=self.name) from exc
        except (UnsafeSubprocessError, OSError) as exc:
            raise SourceUnavailableError(f"cannot run kubectl: {exc}", source=self.name) from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise SourceUnavailableError(
                stderr or f"kubectl exited with status {result.returncode}",
                source=self.name,
            )

        try:
            snapshots = snapshots_from_list(result.stdout)
        except ValidationError as exc:
            raise SourceUnavailableError(f"cannot parse kubectl output: {exc}", source=self.name) from exc

        logger.debug("Listed %s jobs via kubectl", len(snapshots))
        return snapshots
