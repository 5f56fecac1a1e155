"""
Query string, form and JSON body encoding.

Structured values (mappings, pydantic models and dataclass instances) are
flattened into ordered url values: a mapping of key to the list of string
values for that key. Pydantic field aliases and the ``"query"`` key of a
dataclass field's metadata rename keys; ``metadata={"query": "-"}`` skips a
dataclass field.

JSON bodies keep "<", ">" and "&" unescaped; no HTML-safe \\u003c style
escaping is applied.
"""
import dataclasses
import json
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel

from .errors import BodyEncodingError, QueryEncodingError

UrlValues = Dict[str, List[str]]

QUERY_METADATA_KEY = "query"


def _is_structure(value: Any) -> bool:
    if isinstance(value, (Mapping, BaseModel)):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _fields(value: Any) -> Iterable[Tuple[str, Any]]:
    """Yield (key, value) pairs of a structured value in declaration order."""
    if isinstance(value, Mapping):
        return [(str(k), v) for k, v in value.items()]
    if isinstance(value, BaseModel):
        return list(value.model_dump(mode="json", by_alias=True).items())
    pairs = []
    for f in dataclasses.fields(value):
        name = f.metadata.get(QUERY_METADATA_KEY, f.name)
        if name == "-":
            continue
        pairs.append((name, getattr(value, f.name)))
    return pairs


def _add_value(values: UrlValues, key: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        values.setdefault(key, []).append("true" if value else "false")
    elif isinstance(value, (list, tuple)):
        for item in value:
            _add_value(values, key, item)
    elif isinstance(value, (set, frozenset)):
        for item in sorted(value, key=str):
            _add_value(values, key, item)
    elif _is_structure(value):
        for sub_key, sub_value in _fields(value):
            _add_value(values, f"{key}[{sub_key}]", sub_value)
    else:
        values.setdefault(key, []).append(str(value))


def encode_values(value: Any) -> UrlValues:
    """
    Flatten a structured value into url values.

    Args:
        value: A mapping, pydantic model or dataclass instance.

    Returns:
        Ordered mapping of key to values. ``None`` fields are omitted, bools
        become "true"/"false", sequences repeat their key and nested
        structures produce ``parent[child]`` keys.

    Raises:
        QueryEncodingError: If value is not a structured value.
    """
    if not _is_structure(value):
        raise QueryEncodingError(value, "expects a mapping, pydantic model or dataclass instance")
    values: UrlValues = {}
    for key, field_value in _fields(value):
        _add_value(values, key, field_value)
    return values


def encode_url_values(values: UrlValues) -> str:
    """Encode url values as "key=val&foo=bar", sorted by key."""
    return urlencode([(key, value) for key in sorted(values) for value in values[key]])


def merge_query(raw_query: str, query_structs: Sequence[Any]) -> str:
    """
    Merge an existing raw query with encoded query structs.

    Values are appended per key in source order: raw query first, then each
    struct in the order given. The result is the canonical sorted encoding.
    """
    url_values: UrlValues = {}
    for key, value in parse_qsl(raw_query, keep_blank_values=True):
        url_values.setdefault(key, []).append(value)
    for query_struct in query_structs:
        for key, values in encode_values(query_struct).items():
            url_values.setdefault(key, []).extend(values)
    return encode_url_values(url_values)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body_json(value: Any) -> bytes:
    """JSON encode value as a newline-terminated UTF-8 body."""
    try:
        encoded = json.dumps(value, default=_json_default, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise BodyEncodingError(value, e) from e
    return (encoded + "\n").encode("utf-8")


def encode_body_form(value: Any) -> bytes:
    """Url encode a structured value as a form body."""
    return encode_url_values(encode_values(value)).encode("ascii")
