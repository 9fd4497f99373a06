import logging
import os
import sys
import threading

import pytest
import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.models.target import RunConfig


class FakeResponse:
    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.text = ""
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def close(self):
        self.closed = True


class FakeSession:
    """requests.Session stand-in: url -> status code, or an exception instance to raise."""

    def __init__(self, outcomes=None, bodies=None):
        self.outcomes = dict(outcomes or {})
        self.bodies = dict(bodies or {})
        self.calls = []
        self.responses = []
        self._lock = threading.Lock()
        self.closed = False

    def get(self, url, **kwargs):
        with self._lock:
            self.calls.append((url, kwargs))
        if url in self.bodies:
            body = self.bodies[url]
            if isinstance(body, Exception):
                raise body
            r = FakeResponse(200, "OK")
            r.text = body
            self.responses.append(r)
            return r
        outcome = self.outcomes.get(url, 200)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome, "")

    def close(self):
        self.closed = True


class FakeProcess:
    def __init__(self, cmd, registry, kill_error=None, wait_error=None):
        self.cmd = cmd
        self.pid = 1000 + len(registry.started)
        self.registry = registry
        self.kill_error = kill_error
        self.wait_error = wait_error
        self.killed = False

    def kill(self):
        if self.kill_error is not None:
            raise self.kill_error
        self.killed = True
        self.registry.running.discard(self)

    def wait(self, timeout=None):
        if self.wait_error is not None:
            raise self.wait_error
        return -9


class FakePopen:
    """Callable replacing subprocess.Popen; records every launched command."""

    def __init__(self, fail_for=(), kill_error=None, wait_error=None):
        self.fail_for = set(fail_for)
        self.kill_error = kill_error
        self.wait_error = wait_error
        self.started = []
        self.running = set()

    def __call__(self, cmd, **kwargs):
        if cmd[-1] in self.fail_for:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])
        proc = FakeProcess(cmd, self, self.kill_error, self.wait_error)
        self.started.append(proc)
        self.running.add(proc)
        return proc

    @property
    def strategies(self):
        return [p.cmd[-1] for p in self.started]


@pytest.fixture(autouse=True)
def _reset_goodcheck_logging():
    yield
    lg = logging.getLogger("goodcheck")
    for h in list(lg.handlers):
        lg.removeHandler(h)
        h.close()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)


@pytest.fixture
def run_config():
    return RunConfig(
        provider="cia",
        passes=1,
        probe_timeout=0.5,
        warmup_delay=1.0,
        executables={"gdpi": "goodbyedpi.exe", "zapret": "winws.exe", "cia": "ciadpi.exe"},
        provider_names={"gdpi": "GoodbyeDPI", "zapret": "Zapret", "cia": "ByeDPI"},
    )


@pytest.fixture
def fake_popen():
    return FakePopen()


@pytest.fixture
def timeout_error():
    return requests.exceptions.ConnectTimeout("timed out")
