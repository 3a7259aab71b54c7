import os

import pytest
from fastapi.testclient import TestClient

# main.py builds its app at import time and refuses to start without a token
os.environ.setdefault("HF_TOKEN", "hf_test_token_for_unit_tests")

from chat_relay.config import Settings  # noqa: E402
from chat_relay.main import create_app  # noqa: E402


class FakeProvider:
    """Replays a script of DeltaEvents; Exception items are raised when reached."""

    def __init__(self, script=()):
        self.script = list(script)
        self.calls = []
        self.pulled = 0
        self.closed = False

    def open_chat_stream(self, messages):
        self.calls.append(messages)
        return self._replay()

    async def _replay(self):
        try:
            for item in self.script:
                self.pulled += 1
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.closed = True


@pytest.fixture
def settings():
    return Settings(hf_token="hf_test_token")


@pytest.fixture
def make_client(settings):
    def _make(script=()):
        provider = FakeProvider(script)
        return TestClient(create_app(settings, provider=provider)), provider

    return _make
