"""Shared pytest fixtures.

Key goals:
- Provide a scripted word connector so protocol code can be tested without
  a router or a socket.
- Prevent the global settings singleton from leaking across tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pytest

from routeros_api_client import config
from routeros_api_client.infra.routeros.exceptions import RouterOSNetworkError


class ScriptedConnector:
    """Word connector that replays router words and records written ones."""

    def __init__(self, replies: Iterable[str] = ()) -> None:
        self.replies = list(replies)
        self.written: list[str] = []

    def feed(self, *words: str) -> None:
        self.replies.extend(words)

    async def write_word(self, word: str) -> None:
        self.written.append(word)

    async def read_word(self) -> str:
        if not self.replies:
            raise RouterOSNetworkError("Connection closed by router")
        return self.replies.pop(0)

    def sentences(self) -> list[list[str]]:
        """Written words grouped into sentences (terminators dropped)."""
        result: list[list[str]] = []
        current: list[str] = []
        for word in self.written:
            if word == "":
                result.append(current)
                current = []
            else:
                current.append(word)
        return result


@pytest.fixture
def connector() -> ScriptedConnector:
    return ScriptedConnector()


@pytest.fixture
def make_connector() -> type[ScriptedConnector]:
    """Factory for additional scripted connectors (one per connection attempt)."""
    return ScriptedConnector


@pytest.fixture
def params() -> dict[str, object]:
    return {"host": "192.168.88.1", "user": "admin", "pass": "secret", "attempts": 3, "delay": 0}


@pytest.fixture(autouse=True)
def _reset_global_settings() -> Iterator[None]:
    """Ensure the settings singleton does not leak between tests."""
    config.set_settings(None)  # type: ignore[arg-type]
    yield
    config.set_settings(None)  # type: ignore[arg-type]
