# ABOUTME: Typed access to the normalized object cache embedded in catalog record pages.
# ABOUTME: Resolves "__ref" pointers by key so a missing node fails in exactly one place.

import re
from typing import Any

from shelfwise.catalog.errors import ParseError

_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")

_REF_FIELD = "__ref"
_ROOT_QUERY_KEY = "ROOT_QUERY"

Node = dict[str, Any]


class GraphLookupError(ParseError):
    """Raised when a key or reference does not resolve to a node in the graph."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No node for key {key!r} in reference graph")
        self.key = key


def normalize_text(value: Any) -> str | None:
    """Trim a string and collapse internal whitespace runs to a single space.

    Non-strings and strings that end up empty are treated as absent.
    """
    if not isinstance(value, str):
        return None
    cleaned = _WHITESPACE_RUN_RE.sub(" ", value.strip())
    return cleaned or None


class ReferenceGraph:
    """A flat map of opaque string keys to nodes, linked by {"__ref": key} pointers.

    The catalog serializes its client-side cache this way: a book node holds
    references to person and series nodes instead of embedding them.
    """

    def __init__(self, nodes: dict[str, Node]) -> None:
        self._nodes = nodes

    @classmethod
    def from_page_data(cls, data: dict[str, Any]) -> "ReferenceGraph":
        """Build a graph from a record page's decoded JSON payload.

        Raises:
            ParseError: If the payload has no props.pageProps.apolloState map.
        """
        try:
            nodes = data["props"]["pageProps"]["apolloState"]
        except (KeyError, TypeError) as exc:
            raise ParseError("Page data has no apolloState object cache") from exc
        if not isinstance(nodes, dict):
            raise ParseError("apolloState is not an object")
        return cls(nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def node(self, key: str) -> Node:
        """Return the node stored under key."""
        node = self._nodes.get(key)
        if not isinstance(node, dict):
            raise GraphLookupError(key)
        return node

    def follow(self, value: Any) -> Node:
        """Resolve a {"__ref": key} pointer to the node it names."""
        key = reference_key(value)
        if key is None:
            raise GraphLookupError(repr(value))
        return self.node(key)

    def root_reference(self, query_key: str) -> str:
        """Return the key that a ROOT_QUERY entry points at."""
        root = self.node(_ROOT_QUERY_KEY)
        key = reference_key(root.get(query_key))
        if key is None:
            raise GraphLookupError(f"{_ROOT_QUERY_KEY}.{query_key}")
        return key


def reference_key(value: Any) -> str | None:
    """Return the target key of a reference value, or None if it isn't one."""
    if not isinstance(value, dict):
        return None
    return normalize_text(value.get(_REF_FIELD))


def dig(node: Node, *path: str) -> Any:
    """Walk nested plain objects inside a single node. Missing steps yield None."""
    current: Any = node
    for step in path:
        if not isinstance(current, dict):
            return None
        current = current.get(step)
    return current


def text_at(node: Node, *path: str) -> str | None:
    """Read a normalized string from a nested path inside a node."""
    return normalize_text(dig(node, *path))
