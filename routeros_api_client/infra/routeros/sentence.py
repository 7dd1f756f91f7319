"""Sentence writer and reader.

The writer sends every word of a Query followed by the empty terminator.
The reader collects words until the reply is complete: empty words end
intermediate blocks (!re, !trap) and are skipped; once a !done or !fatal
marker has been seen, the next empty word ends the whole reply.
"""

from typing import Protocol

from routeros_api_client.infra.routeros.parser import DONE, FATAL
from routeros_api_client.infra.routeros.query import Query


class WordConnector(Protocol):
    async def write_word(self, word: str) -> None: ...

    async def read_word(self) -> str: ...


async def write_sentence(connector: WordConnector, query: Query) -> list[str]:
    """Write a Query to the router.

    Returns:
        The words that were sent (terminator included)
    """
    words = query.sentence()
    for word in words:
        await connector.write_word(word)
    return words


async def read_sentence(connector: WordConnector) -> list[str]:
    """Read one complete reply.

    Returns:
        Non-empty words of the reply, in order

    Raises:
        RouterOSConnectionError: If the transport fails while reading
    """
    response: list[str] = []
    last_reply = False

    while True:
        word = await connector.read_word()

        if word == "":
            if last_reply:
                break
            continue

        response.append(word)

        if word in (DONE, FATAL):
            last_reply = True

    return response
