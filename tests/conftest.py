import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ["TESTING"] = "1"
os.environ.setdefault("JOB_LOG_DIR", tempfile.mkdtemp(prefix="jobrunner-logs-"))

from jobrunner import redis_helper
from jobrunner.main import app as fastapi_app
from jobrunner.status_log import ERROR_CHANNEL, STATUS_CHANNEL


@pytest.fixture(autouse=True)
def fresh_redis():
    redis_helper._inmemory_client = None
    yield
    redis_helper._inmemory_client = None


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://testserver") as ac:
        yield ac


class LogCapture:
    def __init__(self, caplog):
        self._caplog = caplog

    def _messages(self, channel):
        return [r.getMessage() for r in self._caplog.records if r.name == channel]

    @property
    def status(self):
        return self._messages(STATUS_CHANNEL)

    @property
    def errors(self):
        return self._messages(ERROR_CHANNEL)


@pytest.fixture
def logs(caplog):
    caplog.set_level("INFO")
    return LogCapture(caplog)


class FakeSpawner:
    """Records argument vectors instead of starting processes."""

    def __init__(self, failures=0, error=None):
        self.failures = failures
        self.error = error
        self.calls = []
        self.spawned = []

    def spawn_detached(self, argv):
        from jobrunner.errors import SpawnError

        self.calls.append(list(argv))
        if len(self.calls) <= self.failures:
            raise self.error or SpawnError("Resource temporarily unavailable")
        self.spawned.append(list(argv))
        return 4242


@pytest.fixture
def make_spawner():
    return FakeSpawner
