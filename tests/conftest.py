"""
Shared fixtures for the stowage test suite.

S3 tests run against moto's in-process mock; Redis tests run against a small
in-memory stand-in for redis-py's ``Connection`` and ``ConnectionPool``.
"""

from typing import Dict, List, Optional

import pytest

from stowage.backends.base import ReadWriter, StorageBackend
from stowage.backends.filesystem_backend import FilesystemStorage
from stowage.backends.memory_backend import MemoryStorage
from stowage.config import StorageOptions
from stowage.error_handling import NotFoundError


# ==================== Time ====================


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a fake clock starting at a fixed time."""
    return FakeClock()


# ==================== Backing stores ====================


class CountingStore(StorageBackend):
    """Memory-backed store that records calls and can be told to fail writes."""

    def __init__(self):
        self.inner = MemoryStorage()
        self.reads = 0
        self.writes = 0
        self.removes = 0
        self.fail_writes = False
        self.fail_removes = False
        self.write_options: List[Optional[StorageOptions]] = []

    def read(self, key: str) -> bytes:
        self.reads += 1
        return self.inner.read(key)

    def write(self, key, data, options=None):
        self.writes += 1
        self.write_options.append(options)
        if self.fail_writes:
            raise OSError("disk full")
        self.inner.write(key, data, options)

    def remove(self, key: str) -> None:
        self.removes += 1
        if self.fail_removes:
            raise OSError("permission denied")
        self.inner.remove(key)


class ReadOnlyWriterStore(ReadWriter):
    """A ReadWriter without remove support."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def read(self, key):
        try:
            return self._data[key]
        except KeyError:
            raise NotFoundError(key) from None

    def write(self, key, data, options=None):
        self._data[key] = data


@pytest.fixture
def counting_store():
    """Provide an instrumented backing store."""
    return CountingStore()


@pytest.fixture
def read_writer_store():
    """Provide a backing store that only supports read and write."""
    return ReadOnlyWriterStore()


@pytest.fixture
def memory_store():
    """Provide an empty memory backend."""
    return MemoryStorage()


@pytest.fixture
def fs_store(tmp_path):
    """Provide a filesystem backend rooted in a temporary directory."""
    return FilesystemStorage(tmp_path / "store")


# ==================== Redis stand-ins ====================


class FakeRedisServer:
    """Minimal in-memory stand-in for the SET/GET/DEL commands."""

    def __init__(self):
        self.data: Dict[str, bytes] = {}
        self.commands: List[tuple] = []
        self.next_reply = None  # overrides the next reply when set

    def execute(self, *args):
        self.commands.append(args)

        if self.next_reply is not None:
            reply, self.next_reply = self.next_reply, None
            return reply

        command = args[0]
        if command == "SET":
            self.data[args[1]] = args[2]
            return b"OK"
        if command == "GET":
            return self.data.get(args[1])
        if command == "DEL":
            return 1 if self.data.pop(args[1], None) is not None else 0
        raise ValueError(f"unsupported command {command}")


class FakeRedisConnection:
    """Matches the send_command/read_response surface of redis-py's Connection."""

    def __init__(self, server: FakeRedisServer):
        self.server = server
        self._pending = None
        self.disconnected = False

    def send_command(self, *args):
        self._pending = self.server.execute(*args)

    def read_response(self):
        reply, self._pending = self._pending, None
        if isinstance(reply, Exception):
            raise reply
        return reply

    def disconnect(self):
        self.disconnected = True


class FakeRedisPool:
    """Matches get_connection/release/disconnect of redis-py's ConnectionPool."""

    def __init__(self, server: FakeRedisServer):
        self.server = server
        self.checked_out = 0
        self.borrowed = 0
        self.disconnected = False

    def get_connection(self):
        self.checked_out += 1
        self.borrowed += 1
        return FakeRedisConnection(self.server)

    def release(self, connection):
        self.checked_out -= 1

    def disconnect(self):
        self.disconnected = True


@pytest.fixture
def redis_server():
    """Provide a fresh fake Redis server."""
    return FakeRedisServer()


@pytest.fixture
def redis_connection(redis_server):
    """Provide a fake dedicated Redis connection."""
    return FakeRedisConnection(redis_server)


@pytest.fixture
def redis_pool(redis_server):
    """Provide a fake Redis connection pool."""
    return FakeRedisPool(redis_server)


# ==================== S3 (moto) ====================


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def mock_s3_client(aws_credentials):
    """Provide a mocked S3 client with a test bucket (no container needed)."""
    boto3 = pytest.importorskip("boto3")
    moto = pytest.importorskip("moto")

    with moto.mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-bucket")
        yield client


@pytest.fixture
def mock_s3_bucket(mock_s3_client):
    """Provide the mocked S3 bucket name."""
    return "test-bucket"

