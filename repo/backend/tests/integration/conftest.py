from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from event_recorder import RecordingPublisher

from floorops.api.dependencies import get_publisher
from floorops.api.main import app
from floorops.infrastructure.cache.redis_client import reset_redis_clients
from floorops.infrastructure.db.session import reset_engines

BACKEND_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def integration_environment(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    database_file = tmp_path_factory.mktemp("db") / "floorops.db"
    database_url = os.getenv("TEST_DATABASE_URL", f"sqlite:///{database_file}")
    redis_url = os.getenv("TEST_REDIS_URL", "redis://localhost:6379/0")

    os.environ["DATABASE_URL"] = database_url
    os.environ["REDIS_URL"] = redis_url
    os.environ["APP_ENV"] = "test"
    os.environ.setdefault("OTEL_SERVICE_NAME", "floorops-backend-test")
    os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    reset_engines()
    reset_redis_clients()

    env = os.environ.copy()
    env["PYTHONPATH"] = f"{BACKEND_DIR / 'src'}{os.pathsep}{env.get('PYTHONPATH', '')}".rstrip(
        os.pathsep
    )

    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", "upgrade", "head"],
        cwd=BACKEND_DIR,
        env=env,
        check=True,
    )
    subprocess.run(
        [sys.executable, "-m", "floorops.tools.seed"],
        cwd=BACKEND_DIR,
        env=env,
        check=True,
    )
    yield
    reset_engines()
    reset_redis_clients()


@pytest.fixture
def publisher() -> Iterator[RecordingPublisher]:
    recording = RecordingPublisher()
    app.dependency_overrides[get_publisher] = lambda: recording
    try:
        yield recording
    finally:
        app.dependency_overrides.pop(get_publisher, None)
