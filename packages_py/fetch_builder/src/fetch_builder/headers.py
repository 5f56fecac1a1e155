"""
Ordered, case-insensitive header multimap.
"""
import base64
from typing import Dict, Iterator, List, Tuple

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~"
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def canonical_header_key(key: str) -> str:
    """
    Return the canonical MIME form of a header key.

    The first letter and any letter following a hyphen are upper-cased, the
    rest lower-cased, so "content-type" becomes "Content-Type". Keys holding
    characters that are not valid in a header token are returned unchanged.
    """
    if not key or any(c not in _TOKEN_CHARS for c in key):
        return key
    chars = []
    upper = True
    for c in key:
        chars.append(c.upper() if upper else c.lower())
        upper = c == "-"
    return "".join(chars)


def basic_auth(username: str, password: str) -> str:
    """Base64 encode username:password for HTTP Basic Authentication."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


class Header:
    """
    Header values keyed by canonical name.

    Keys keep first-insertion order and each key holds its values in the
    order they were added.
    """

    def __init__(self) -> None:
        self._values: Dict[str, List[str]] = {}

    def add(self, key: str, value: str) -> None:
        """Append value to the values of key."""
        self._values.setdefault(canonical_header_key(key), []).append(value)

    def set(self, key: str, value: str) -> None:
        """Replace all values of key with value."""
        self._values[canonical_header_key(key)] = [value]

    def get(self, key: str) -> str:
        """First value of key, or an empty string."""
        values = self._values.get(canonical_header_key(key))
        return values[0] if values else ""

    def get_list(self, key: str) -> List[str]:
        return list(self._values.get(canonical_header_key(key), []))

    def delete(self, key: str) -> None:
        self._values.pop(canonical_header_key(key), None)

    def items(self) -> List[Tuple[str, str]]:
        """Flattened (key, value) pairs, per-key order preserved."""
        return [(key, value) for key, values in self._values.items() for value in values]

    def copy(self) -> "Header":
        clone = Header()
        clone._values = {key: list(values) for key, values in self._values.items()}
        return clone

    def to_dict(self) -> Dict[str, List[str]]:
        return {key: list(values) for key, values in self._values.items()}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_key(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Header({self._values!r})"
