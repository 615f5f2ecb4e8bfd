"""Unit tests for URL normalization and content-addressed keys."""

import pytest

from seen.domain.exceptions import FetchError
from seen.domain.identifiers import (
    bucket_path_for,
    link_id_for_content,
    link_id_for_url,
    normalize_url,
    vector_id_for,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("HTTPS://Example.COM/Path", "https://example.com/Path"),
        ("https://example.com:443/a/", "https://example.com/a"),
        ("http://example.com:8080/a?b=1#frag", "http://example.com:8080/a?b=1"),
        ("https://example.com", "https://example.com/"),
        ("  https://example.com/x  ", "https://example.com/x"),
        ("http://[::1]:8080/x", "http://[::1]:8080/x"),
        ("https://[2001:DB8::1]:443/", "https://[2001:db8::1]/"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", ["ftp://example.com/file", "javascript:alert(1)", "example.com", ""])
def test_normalize_rejects_non_http(raw):
    with pytest.raises(FetchError) as exc_info:
        normalize_url(raw)
    assert exc_info.value.reason == "unsupported-scheme"


def test_equivalent_urls_share_an_id():
    assert link_id_for_url("https://example.com/a/") == link_id_for_url("HTTPS://example.com/a#x")
    assert link_id_for_url("https://example.com/a") != link_id_for_url("https://example.com/b")
    assert len(link_id_for_url("https://example.com/a")) == 32


def test_content_id_depends_only_on_bytes():
    assert link_id_for_content(b"abc") == link_id_for_content(b"abc")
    assert link_id_for_content(b"abc") != link_id_for_content(b"abd")


def test_bucket_path_uses_content_type_extension():
    assert bucket_path_for("id1", "text/html; charset=utf-8") == "content/id1.html"
    assert bucket_path_for("id1", "application/pdf") == "content/id1.pdf"
    assert bucket_path_for("id1", "application/x-unknown") == "content/id1.bin"


def test_vector_ids_differ_per_attempt():
    assert vector_id_for("L", "a1", 0) != vector_id_for("L", "b2", 0)
    assert vector_id_for("L", "a1", 3) == "L-a1-3"
