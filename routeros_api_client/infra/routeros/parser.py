"""Reply parser for RouterOS API responses.

A RouterOS reply is a sequence of blocks. Each block starts with one of
!re, !trap, !done or !fatal and ends with an empty word. The reply ends
with a !done or !fatal block. The sentence reader strips the empty words,
so this module works on the flat list of remaining words.

Parsing rules:
- every !re block contributes one row (dict of attribute key -> value)
- attributes following !trap/!done are collected into Reply.after
- a reply containing !fatal is returned verbatim as the raw word list
- words that are not attributes are dropped
"""

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Final, overload

RE: Final[str] = "!re"
TRAP: Final[str] = "!trap"
DONE: Final[str] = "!done"
FATAL: Final[str] = "!fatal"

# =key=value for attributes, .key=value for API metadata (.tag, .id, .section).
# The key runs to the last "=" of the word.
ATTRIBUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[=.](.+)=(.*)", re.DOTALL)

Record = dict[str, str]


@dataclass
class Reply:
    """Parsed reply: data rows plus attributes of the closing block.

    Behaves like a read-only sequence of rows, so reply[0]["name"] and
    "for row in reply" work directly.
    """

    rows: list[Record] = field(default_factory=list)
    after: Record = field(default_factory=dict)

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> list[Record]: ...

    def __getitem__(self, index: int | slice) -> Record | list[Record]:
        return self.rows[index]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.rows)

    @property
    def is_trap(self) -> bool:
        """True if the router reported an error (!trap carries a message)."""
        return "message" in self.after and not self.rows

    def to_dict(self) -> dict[str, list[Record] | Record]:
        return {"rows": self.rows, "after": self.after}


ParsedReply = Reply | list[str]


def tokenize_attribute(word: str) -> tuple[str, str] | None:
    """Split an attribute word into (key, value).

    Example:
        tokenize_attribute("=mac-address=00:11:22:33:44:55")
        # ('mac-address', '00:11:22:33:44:55')
        tokenize_attribute(".tag=4")  # ('tag', '4')
        tokenize_attribute("!done")   # None
    """
    match = ATTRIBUTE_PATTERN.match(word)
    if match is None:
        return None
    return match.group(1), match.group(2)


def parse_block(words: Sequence[str]) -> ParsedReply:
    """Parse the words of one or more blocks into a Reply.

    Returns the words unchanged (as a list) if a !fatal marker is found.
    """
    reply = Reply()
    current = -1

    for index, word in enumerate(words):
        if word == RE:
            reply.rows.append({})
            current = len(reply.rows) - 1
        elif word == FATAL:
            return list(words)
        elif word in (TRAP, DONE):
            for trailing in words[index + 1 :]:
                token = tokenize_attribute(trailing)
                if token is not None:
                    reply.after[token[0]] = token[1]
            break
        else:
            token = tokenize_attribute(word)
            if token is None:
                continue
            if current < 0:
                # attributes before any !re marker open an implicit row
                reply.rows.append({})
                current = 0
            reply.rows[current][token[0]] = token[1]

    return reply


def split_blocks(raw: Sequence[str]) -> list[list[str]]:
    """Split a raw reply at every !re marker.

    Each block runs from its marker up to the next marker; the last one
    keeps everything until the end of the reply (including !done).
    """
    positions = [index for index, word in enumerate(raw) if word == RE]
    if not positions:
        return []
    bounds = zip(positions, [*positions[1:], len(raw)], strict=True)
    return [list(raw[start:end]) for start, end in bounds]


def parse_reply(raw: Sequence[str]) -> ParsedReply:
    """Parse a raw reply (as returned by the sentence reader).

    Example:
        parse_reply(["!re", "=a=1", "!re", "=a=2", "!done"]).rows
        # [{'a': '1'}, {'a': '2'}]
        parse_reply(["!trap", "=message=bad command", "!done"]).after
        # {'message': 'bad command'}
    """
    if FATAL in raw:
        return list(raw)

    blocks = split_blocks(raw)
    if len(blocks) < 2:
        return parse_block(raw)

    reply = Reply()
    for block in blocks:
        parsed = parse_block(block)
        if not isinstance(parsed, Reply):
            return list(raw)
        if parsed.rows:
            reply.rows.append(parsed.rows[0])
        reply.after.update(parsed.after)
    return reply
