import sys
from pathlib import Path

# Ensure the application package root is on sys.path so importing application
# modules (e.g. `core.config`) works during pytest collection regardless of
# the directory pytest is invoked from.
project_root = str(Path(__file__).resolve().parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest  # noqa: E402

from core.config import settings  # noqa: E402


@pytest.fixture(autouse=True)
def no_telemetry_entrypoints(monkeypatch):
    """Keep installed telemetry plugins out of tests."""
    monkeypatch.setattr(settings.distribution, "TELEMETRY_ENTRYPOINT_GROUP", "")
