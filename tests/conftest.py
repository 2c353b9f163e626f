import pytest

from debugbar.core.config import DebugConfig
from debugbar.toolbar.collector import create_collector, dispose_collector
from debugbar.toolbar.gitinfo import GitInfo
from debugbar.toolbar.snapshot import Environment


class StubGit(GitInfo):
    """GitInfo with fixed answers instead of running git."""

    def __init__(self, sha="0123abcd", branch="main", url=None):
        super().__init__()
        self._sha = sha
        self._branch = branch
        self._url = url

    def head_sha1(self):
        return self._sha

    def current_branch(self):
        return self._branch

    def head_view_url(self):
        return self._url


class StubEnvironment(Environment):
    """Environment with a fake request and predictable memory figures."""

    def __init__(self, files=None, git=None):
        super().__init__(app_version="9.9.9", git=git or StubGit())
        self.files = files if files is not None else [__file__]

    def request_info(self):
        return {
            "method": "GET",
            "url": "/wiki/Main_Page?action=view",
            "headers": {"Accept": "text/html"},
            "params": {"action": "view"},
        }

    def memory_usage(self):
        return 3 * 1024 * 1024

    def peak_memory_usage(self):
        return 5 * 1024 * 1024

    def included_files(self):
        return list(self.files)


@pytest.fixture
def env():
    return StubEnvironment()


@pytest.fixture
def bound_collector():
    """An enabled collector bound to the current context for the test."""
    collector, token = create_collector(DebugConfig(enabled=True))
    yield collector
    dispose_collector(token)
