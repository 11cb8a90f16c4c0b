from typing import Callable, Dict, List

import httpx
import pytest

from cache import ResponseCache
from lastfm_client import LastFMClient


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingTransport:
    """Serves Last.fm payloads by method and records every query sent"""

    def __init__(self, responder: Callable[[Dict[str, str]], httpx.Response]):
        self.responder = responder
        self.calls: List[Dict[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.calls.append(params)
        return self.responder(params)

    def methods(self) -> List[str]:
        return [call.get("method") for call in self.calls]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock):
    def _make(responder, cache_dir=None):
        transport = RecordingTransport(responder)
        cache = ResponseCache(cache_dir, clock=clock)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        return LastFMClient("test-key", "alice", cache, http_client=http_client), transport

    return _make
