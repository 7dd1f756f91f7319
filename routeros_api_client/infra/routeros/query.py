"""Query builder for RouterOS API sentences.

A Query is an endpoint plus attribute words, filter words, an optional
operations directive and an optional tag. sentence() serializes it into the
ordered list of words sent to the router, terminated by an empty word.

Filter words:
    ("disabled",)                 -> ?disabled
    ("address", "10.0.0.1")       -> ?address=10.0.0.1
    ("rx-byte", ">", "1000")      -> ?>rx-byte=1000
    ("comment", "-", None)        -> ?-comment
    ("type", "!=", "ether")       -> ?=type=ether, ?#!

Example:
    query = (
        Query("/interface/print")
        .where("type", "=", "ether")
        .where("running")
        .operations("&")
        .tag("ifaces")
    )
    query.sentence()
    # ['/interface/print', '?=type=ether', '?running', '?#&', '.tag=ifaces', '']
"""

from collections.abc import Sequence
from typing import Any, Final

from routeros_api_client.infra.routeros.exceptions import RouterOSQueryError

FILTER_OPERATORS: Final[set[str]] = {"=", ">", "<", "-"}
NEGATED_OPERATORS: Final[set[str]] = {f"!{op}" for op in FILTER_OPERATORS}
NEGATION_WORD: Final[str] = "?#!"

Condition = Sequence[Any]


class Query:
    """RouterOS API command under construction."""

    def __init__(
        self,
        endpoint: str,
        attributes: Sequence[str] | None = None,
        tag: str | None = None,
    ) -> None:
        """Initialize query.

        Args:
            endpoint: Command path (e.g. "/ip/address/print")
            attributes: Pre-formatted attribute words (e.g. "=name=admin")
            tag: Optional tag echoed back by the router

        Raises:
            RouterOSQueryError: If endpoint is empty
        """
        if not endpoint:
            raise RouterOSQueryError("Endpoint of query is not set")

        self.endpoint = endpoint
        self.attributes: list[str] = list(attributes or [])
        self.filters: list[str] = []
        self._operations: str | None = None
        self._tag: str | None = tag

    def __repr__(self) -> str:
        return f"Query({self.endpoint!r}, attributes={len(self.attributes)}, filters={len(self.filters)})"

    def add(self, word: str) -> "Query":
        """Append a pre-formatted attribute word."""
        self.attributes.append(word)
        return self

    def equal(self, key: str, value: Any = None) -> "Query":
        """Set a command attribute (=key=value)."""
        self.attributes.append(f"={key}={'' if value is None else value}")
        return self

    def where(self, key: str, operator: str | None = None, value: Any = None) -> "Query":
        """Add a filter word.

        With two arguments the second one is the value unless it is a known
        operator, so where("name", "ether1") is an equality filter and
        where("comment", "-") asserts the property is absent.

        Raises:
            RouterOSQueryError: If operator is not supported
        """
        if (
            operator is not None
            and value is None
            and operator not in FILTER_OPERATORS | NEGATED_OPERATORS
        ):
            value, operator = operator, None

        if operator is None:
            word = f"?{key}" if value is None else f"?{key}={value}"
            self.filters.append(word)
            return self

        negate = operator.startswith("!")
        base = operator[1:] if negate else operator
        if base not in FILTER_OPERATORS:
            raise RouterOSQueryError(
                f'Operator "{operator}" is not in allowed list '
                f"[{', '.join(sorted(FILTER_OPERATORS))}] (prefix with ! to negate)"
            )

        if base == "-":
            self.filters.append(f"?-{key}")
        else:
            self.filters.append(f"?{base}{key}={'' if value is None else value}")

        if negate:
            self.filters.append(NEGATION_WORD)
        return self

    def where_condition(self, condition: Condition) -> "Query":
        """Add a filter from a positional 1-3 item condition.

        Raises:
            RouterOSQueryError: If condition is not a list/tuple of 1-3 items
        """
        if isinstance(condition, str | bytes) or not isinstance(condition, Sequence):
            raise RouterOSQueryError(
                f"Filter condition must be a list or tuple, got {type(condition).__name__}"
            )
        if not 1 <= len(condition) <= 3:
            raise RouterOSQueryError('From 1 to 3 parameters of "where" condition is allowed')

        return self.where(*condition)

    def operations(self, operations: str) -> "Query":
        """Set the operations directive applied to the filter stack (?#...)."""
        self._operations = operations
        return self

    def tag(self, name: str) -> "Query":
        """Tag the query (.tag=name)."""
        self._tag = name
        return self

    def get_tag(self) -> str | None:
        return self._tag

    def copy(self) -> "Query":
        """Return an independent copy of this query."""
        clone = Query(self.endpoint, self.attributes, tag=self._tag)
        clone.filters = list(self.filters)
        clone._operations = self._operations
        return clone

    def sentence(self) -> list[str]:
        """Serialize into words, including the terminating empty word."""
        words = [self.endpoint, *self.attributes, *self.filters]
        if self._operations:
            words.append(f"?#{self._operations}")
        if self._tag:
            words.append(f".tag={self._tag}")
        words.append("")
        return words


def build_query(
    endpoint: "str | Query",
    where: Sequence[Condition] | None = None,
    operations: str | None = None,
    tag: str | None = None,
) -> Query:
    """Build a Query from loosely-typed arguments.

    Args:
        endpoint: Command path or an existing Query (copied, never modified)
        where: List of conditions, each a 1-3 item tuple/list
        operations: Operations directive
        tag: Query tag

    Raises:
        RouterOSQueryError: On a malformed endpoint or condition
    """
    if isinstance(endpoint, Query):
        query = endpoint.copy()
    elif isinstance(endpoint, str):
        query = Query(endpoint)
    else:
        raise RouterOSQueryError(f"Parameters cannot be processed: {type(endpoint).__name__}")

    if where:
        if isinstance(where, str) or not isinstance(where, Sequence):
            raise RouterOSQueryError("where must be a list of conditions")
        for condition in where:
            query.where_condition(condition)

    if operations:
        query.operations(operations)

    if tag:
        query.tag(tag)

    return query


def to_query(value: Any) -> Query:
    """Convert a Query, an endpoint string, or [endpoint, *attributes] into a Query.

    Raises:
        RouterOSQueryError: If value cannot be converted
    """
    if isinstance(value, Query):
        return value
    if isinstance(value, str):
        return Query(value)
    if isinstance(value, list | tuple) and value and all(isinstance(w, str) for w in value):
        endpoint, *attributes = value
        return Query(endpoint, attributes)
    raise RouterOSQueryError("Parameters cannot be processed")
