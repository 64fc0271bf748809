"""Global pytest configuration for the job exporter test-suite.

The ``src`` tree is put on ``sys.path`` so the suite runs from a plain
checkout without installing the package first.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
src_dir = project_root / "src"

for path in (src_dir, project_root):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from kube_job_exporter.jobs import AggregationStore  # noqa: E402


@pytest.fixture
def store() -> AggregationStore:
    """Return an empty aggregation store."""
    return AggregationStore()
