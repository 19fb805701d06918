"""Shared fixtures for Package Backup Tool tests."""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Allow running the tests from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from package_backup.core.config import Settings
from package_backup.core.credentials import BackupConfig
from package_backup.core.errors import RepositoryError
from package_backup.backup.github_client import RepositoryStatus
from package_backup.backup.packages import PackageRef
from package_backup.backup.vcs import VersionControl

FIXED_NOW = datetime(2026, 10, 19, 14, 30)
FIXED_STAMP = "2026-10-19-14-30"


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class FakeSession:
    """Stands in for requests.Session; replays queued responses in order."""

    def __init__(self, responses=None):
        self.headers = {}
        self.calls = []
        self.responses = list(responses or [])
        self.closed = False

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def close(self):
        self.closed = True


class FakeClient:
    """GitHubClient double recording ensure_repository calls."""

    def __init__(self, error=None, connected=True):
        self.error = error
        self.connected = connected
        self.ensured = []
        self.closed = False

    def ensure_repository(self, name):
        self.ensured.append(name)
        if self.error:
            raise self.error
        return RepositoryStatus.EXISTS

    def test_connection(self):
        return self.connected

    def repository_url(self, name):
        return f"https://github.com/octocat/{name}.git"

    def authenticated_url(self, name):
        return f"https://secret-token@github.com/octocat/{name}.git"

    def close(self):
        self.closed = True


class FakeVcs(VersionControl):
    """VersionControl double recording every call."""

    def __init__(self, fail_on=None, error=None):
        self.calls = []
        self.fail_on = fail_on
        self.error = error

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name == self.fail_on:
            raise self.error

    def init_or_verify(self, path, remote_url):
        self._record("init_or_verify", path, remote_url)
        return True

    def configure_identity(self, path, name, email):
        self._record("configure_identity", path, name, email)

    def branch_and_commit(self, path, branch, message):
        self._record("branch_and_commit", path, branch, message)

    def repoint_remote(self, path, url):
        self._record("repoint_remote", path, url)

    def push(self, path, branch):
        self._record("push", path, branch)

    @property
    def names(self):
        return [call[0] for call in self.calls]


class ClientFactory:
    """Counts how many clients the orchestrator asked for."""

    def __init__(self, client):
        self.client = client
        self.configs = []

    def __call__(self, config):
        self.configs.append(config)
        return self.client

    @property
    def call_count(self):
        return len(self.configs)


@pytest.fixture
def settings(tmp_path):
    return Settings(config_dir=str(tmp_path / "settings"))


@pytest.fixture
def config():
    return BackupConfig(username="octocat", token="secret-token", default_branch="backup")


@pytest.fixture
def package(tmp_path):
    source = tmp_path / "cache" / "foo"
    (source / "Runtime").mkdir(parents=True)
    (source / "package.json").write_text('{"name": "foo", "version": "1.0.0"}')
    (source / "Runtime" / "Foo.cs").write_bytes(b"public class Foo {}\n\x00\xff")
    return PackageRef(name="foo", source_path=source)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def failing_client():
    return FakeClient(error=RepositoryError("Failed to create repository", status_code=422, body="name already exists"))


@pytest.fixture
def fake_vcs():
    return FakeVcs()
