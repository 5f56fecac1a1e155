"""
Tests for the header multimap.
"""
from fetch_builder.headers import Header, basic_auth, canonical_header_key


def test_canonical_header_key():
    assert canonical_header_key("content-type") == "Content-Type"
    assert canonical_header_key("X-API-KEY") == "X-Api-Key"
    assert canonical_header_key("accept") == "Accept"
    # Invalid token characters leave the key alone
    assert canonical_header_key("foo bar") == "foo bar"
    assert canonical_header_key("") == ""


def test_add_merges_case_varying_keys():
    header = Header()
    header.add("Foo", "1")
    header.add("foo", "2")
    header.add("FOO", "3")

    assert list(header) == ["Foo"]
    assert header.get_list("fOo") == ["1", "2", "3"]
    assert header.get("foo") == "1"
    assert header.items() == [("Foo", "1"), ("Foo", "2"), ("Foo", "3")]


def test_set_replaces_values():
    header = Header()
    header.add("Accept", "text/html")
    header.add("Accept", "text/plain")
    header.set("accept", "application/json")

    assert header.get_list("Accept") == ["application/json"]
    assert len(header) == 1


def test_get_missing_and_delete():
    header = Header()
    assert header.get("Missing") == ""
    assert header.get_list("Missing") == []

    header.set("X-Trace", "abc")
    assert "x-trace" in header
    header.delete("X-TRACE")
    assert "X-Trace" not in header


def test_copy_is_independent():
    header = Header()
    header.add("A", "1")
    clone = header.copy()
    clone.add("A", "2")
    clone.set("B", "3")

    assert header.to_dict() == {"A": ["1"]}
    assert clone.to_dict() == {"A": ["1", "2"], "B": ["3"]}


def test_basic_auth():
    assert basic_auth("Aladdin", "open sesame") == "QWxhZGRpbjpvcGVuIHNlc2FtZQ=="
    assert basic_auth("u", "p") == "dTpw"
