"""RouterOS API word length codec.

Every word on the wire is preceded by a variable-length size prefix:

    length < 0x80        1 byte   0xxxxxxx
    length < 0x4000      2 bytes  10xxxxxx xxxxxxxx
    length < 0x200000    3 bytes  110xxxxx xxxxxxxx xxxxxxxx
    length < 0x10000000  4 bytes  1110xxxx xxxxxxxx xxxxxxxx xxxxxxxx
    otherwise            5 bytes  11110000 xxxxxxxx xxxxxxxx xxxxxxxx xxxxxxxx

A zero-length word terminates a sentence. Control bytes starting with
0xF8 and above are reserved by RouterOS and never start a word.
"""

from typing import Final

MAX_WORD_LENGTH: Final[int] = 0xFFFFFFFF


def encode_length(length: int) -> bytes:
    """Encode a word length as a RouterOS size prefix.

    Args:
        length: Word length in bytes

    Returns:
        Encoded prefix (1 to 5 bytes)

    Raises:
        ValueError: If length is negative or too large for the protocol
    """
    if length < 0 or length > MAX_WORD_LENGTH:
        raise ValueError(f"Word length out of range: {length}")

    if length < 0x80:
        return length.to_bytes(1, "big")
    if length < 0x4000:
        return (length | 0x8000).to_bytes(2, "big")
    if length < 0x200000:
        return (length | 0xC00000).to_bytes(3, "big")
    if length < 0x10000000:
        return (length | 0xE0000000).to_bytes(4, "big")
    return b"\xf0" + length.to_bytes(4, "big")


def prefix_size(first_byte: int) -> int:
    """Return the total size of a length prefix from its first byte.

    Raises:
        ValueError: If first_byte is a reserved control byte
    """
    if first_byte & 0x80 == 0x00:
        return 1
    if first_byte & 0xC0 == 0x80:
        return 2
    if first_byte & 0xE0 == 0xC0:
        return 3
    if first_byte & 0xF0 == 0xE0:
        return 4
    if first_byte == 0xF0:
        return 5
    raise ValueError(f"Reserved control byte in length prefix: 0x{first_byte:02x}")


def decode_length(prefix: bytes) -> int:
    """Decode a complete size prefix into a word length.

    Args:
        prefix: All bytes of the prefix (see prefix_size())

    Returns:
        Word length in bytes

    Raises:
        ValueError: If prefix is empty, reserved, or has the wrong size
    """
    if not prefix:
        raise ValueError("Empty length prefix")

    size = prefix_size(prefix[0])
    if len(prefix) != size:
        raise ValueError(f"Length prefix must be {size} bytes, got {len(prefix)}")

    if size == 1:
        return prefix[0]
    if size == 2:
        return int.from_bytes(prefix, "big") & 0x3FFF
    if size == 3:
        return int.from_bytes(prefix, "big") & 0x1FFFFF
    if size == 4:
        return int.from_bytes(prefix, "big") & 0x0FFFFFFF
    return int.from_bytes(prefix[1:], "big")


def encode_word(word: str, encoding: str = "utf-8") -> bytes:
    """Encode a word with its size prefix."""
    data = word.encode(encoding)
    return encode_length(len(data)) + data
