"""Tests for RouterOS reply parsing."""

import pytest

from routeros_api_client.infra.routeros.parser import (
    Reply,
    parse_block,
    parse_reply,
    split_blocks,
    tokenize_attribute,
)


class TestTokenizeAttribute:
    """Tests for tokenize_attribute()."""

    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("=name=ether1", ("name", "ether1")),
            (".tag=42", ("tag", "42")),
            ("=.id=*1A", (".id", "*1A")),
            ("=comment=", ("comment", "")),
            ("=comment=a=b", ("comment=a", "b")),
            ("=ret=1a2b3c", ("ret", "1a2b3c")),
        ],
    )
    def test_attribute_words(self, word: str, expected: tuple[str, str]) -> None:
        assert tokenize_attribute(word) == expected

    @pytest.mark.parametrize("word", ["!done", "!re", "name=value", "=novalue", ""])
    def test_non_attribute_words(self, word: str) -> None:
        assert tokenize_attribute(word) is None


class TestParseReply:
    """Tests for parse_reply()."""

    def test_single_row(self) -> None:
        reply = parse_reply(["!re", "=name=x", "=value=y", "!done"])

        assert isinstance(reply, Reply)
        assert reply.rows == [{"name": "x", "value": "y"}]
        assert reply.after == {}
        assert reply[0]["name"] == "x"
        assert len(reply) == 1

    def test_multiple_rows_keep_order(self) -> None:
        reply = parse_reply(["!re", "=a=1", "!re", "=a=2", "!done"])

        assert isinstance(reply, Reply)
        assert list(reply) == [{"a": "1"}, {"a": "2"}]

    def test_many_rows_with_trailing_tag(self) -> None:
        raw = [
            "!re", "=address=10.0.0.2", ".tag=leases",
            "!re", "=address=10.0.0.3", ".tag=leases",
            "!re", "=address=10.0.0.4", ".tag=leases",
            "!done", ".tag=leases",
        ]  # fmt: skip
        reply = parse_reply(raw)

        assert isinstance(reply, Reply)
        assert [row["address"] for row in reply] == ["10.0.0.2", "10.0.0.3", "10.0.0.4"]
        assert reply.rows[0]["tag"] == "leases"
        assert reply.after == {"tag": "leases"}

    def test_trap_collects_after(self) -> None:
        reply = parse_reply(["!trap", "=message=bad command", "!done"])

        assert isinstance(reply, Reply)
        assert reply.rows == []
        assert reply.after == {"message": "bad command"}
        assert reply.is_trap

    def test_done_with_ret(self) -> None:
        reply = parse_reply(["!done", "=ret=ebddd18303a54111e2dea05a92ab46b4"])

        assert isinstance(reply, Reply)
        assert reply.rows == []
        assert reply.after == {"ret": "ebddd18303a54111e2dea05a92ab46b4"}
        assert not reply.is_trap

    def test_done_only(self) -> None:
        reply = parse_reply(["!done"])
        assert isinstance(reply, Reply)
        assert reply.rows == []
        assert reply.after == {}

    def test_row_followed_by_trap(self) -> None:
        reply = parse_reply(["!re", "=a=1", "!trap", "=message=interrupted", "!done"])

        assert isinstance(reply, Reply)
        assert reply.rows == [{"a": "1"}]
        assert reply.after == {"message": "interrupted"}

    def test_non_attribute_words_are_dropped(self) -> None:
        reply = parse_reply(["!re", "=a=1", "garbage", "!weird", "=b=2", "!done"])

        assert isinstance(reply, Reply)
        assert reply.rows == [{"a": "1", "b": "2"}]

    def test_key_runs_to_last_equals_sign(self) -> None:
        reply = parse_reply(["!re", "=comment=a=b", "!done", "=ret=x=y"])

        assert isinstance(reply, Reply)
        assert reply.rows == [{"comment=a": "b"}]
        assert reply.after == {"ret=x": "y"}

    def test_fatal_returns_raw_words(self) -> None:
        raw = ["!re", "=a=1", "!re", "=a=2", "!fatal", "session terminated"]
        assert parse_reply(raw) == raw

    def test_fatal_alone(self) -> None:
        assert parse_reply(["!fatal", "not logged in"]) == ["!fatal", "not logged in"]

    def test_empty_reply(self) -> None:
        reply = parse_reply([])
        assert isinstance(reply, Reply)
        assert reply.rows == []

    def test_to_dict(self) -> None:
        reply = parse_reply(["!re", "=a=1", "!done", ".tag=t"])
        assert isinstance(reply, Reply)
        assert reply.to_dict() == {"rows": [{"a": "1"}], "after": {"tag": "t"}}


class TestParseBlock:
    """Tests for parse_block() and split_blocks()."""

    def test_attributes_before_marker_open_a_row(self) -> None:
        reply = parse_block(["=a=1", "!done"])
        assert isinstance(reply, Reply)
        assert reply.rows == [{"a": "1"}]

    def test_empty_re_block_is_an_empty_row(self) -> None:
        reply = parse_block(["!re", "!done"])
        assert isinstance(reply, Reply)
        assert reply.rows == [{}]

    def test_fatal_in_block_returns_block(self) -> None:
        assert parse_block(["!re", "!fatal"]) == ["!re", "!fatal"]

    def test_split_blocks(self) -> None:
        raw = ["!re", "=a=1", "!re", "=a=2", "!done", ".tag=1"]
        assert split_blocks(raw) == [["!re", "=a=1"], ["!re", "=a=2", "!done", ".tag=1"]]

    def test_split_without_markers(self) -> None:
        assert split_blocks(["!done"]) == []
