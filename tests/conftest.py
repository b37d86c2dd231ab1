"""
Brief: Shared pytest fixtures and fakes for LogLens tests.

Inputs:
  - None

Outputs:
  - None
"""

import threading
from pathlib import Path

import pytest

from loglens.counter import HitCounter


class FakeResolver:
    """
    Brief: Thread-safe stand-in for PTRResolver that never touches the network.

    Inputs:
      - names: dict mapping ip -> hostname (missing ips resolve to None)
      - gate: optional threading.Event every lookup waits on
      - error: optional exception instance raised by every lookup

    Outputs:
      - Records each requested ip in .calls
    """

    def __init__(self, names=None, gate=None, error=None):
        self.names = dict(names or {})
        self.gate = gate
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def resolve(self, ip):
        with self._lock:
            self.calls.append(ip)
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return self.names.get(ip)


class GatedCounter(HitCounter):
    """
    Brief: HitCounter whose increments block until released.

    Inputs:
      - None

    Outputs:
      - .entered is set by the first increment; increments wait on .release
    """

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def increment(self, ip, amount=1):
        self.entered.set()
        self.release.wait(5)
        return super().increment(ip, amount)


@pytest.fixture
def fake_resolver():
    """
    Brief: Provide a FakeResolver with two known hostnames.

    Inputs:
      - None

    Outputs:
      - FakeResolver instance
    """
    return FakeResolver({
        "10.0.0.1": "alpha.example.net",
        "10.0.0.2": "beta.example.net",
    })


@pytest.fixture
def write_log(tmp_path):
    """
    Brief: Factory writing log content (str or bytes) to a temp file.

    Inputs:
      - content: str or bytes
      - name: optional filename

    Outputs:
      - Path to the written file
    """

    def _write(content, name="access.log"):
        path = Path(tmp_path) / name
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path

    return _write


W3C_LOG = (
    "#Software: Microsoft Internet Information Services 6.0\r\n"
    "#Version: 1.0\r\n"
    "#Date: 2012-03-26 00:00:00\r\n"
    "#Fields: date time c-ip cs-method cs-uri-stem sc-status\r\n"
    "2012-03-26 00:00:01 10.0.0.1 GET /index.html 200\r\n"
    "2012-03-26 00:00:02 10.0.0.2 GET /about.html 200\r\n"
    "2012-03-26 00:00:03 10.0.0.1 GET /logo.png 304\r\n"
    "\r\n"
    "2012-03-26 00:00:04\r\n"
    "#Fields: date time s-ip cs-method cs-uri-stem c-ip sc-status\r\n"
    "2012-03-26 01:00:00 192.168.1.1 GET /a 10.0.0.3 200\r\n"
    "2012-03-26 01:00:01 192.168.1.1 GET /b 10.0.0.1 404\r\n"
    "2012-03-26 01:00:02 192.168.1.1 GET /c 10.0.0.3 200\r\n"
)

W3C_COUNTS = {"10.0.0.1": 3, "10.0.0.2": 1, "10.0.0.3": 2}


@pytest.fixture
def w3c_log(write_log):
    """
    Brief: Two-block W3C log with a malformed line and a blank line.

    Inputs:
      - None

    Outputs:
      - Path to the log; expected counts are W3C_COUNTS
    """
    return write_log(W3C_LOG)
