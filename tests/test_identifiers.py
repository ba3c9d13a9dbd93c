"""Tests for parsing input text into post references."""

from reply_guy.core.identifiers import extract_identifiers
from reply_guy.core.types import PostReference


def test_duplicate_ids_collapse_to_first_source_url():
    text = "https://x.com/alice/status/123\nnot a url\nhttps://x.com/bob/status/123"

    refs = extract_identifiers(text)

    assert refs == [PostReference(source_url="https://x.com/alice/status/123", id="123")]


def test_known_hosts_and_generic_fallback():
    text = "\n".join(
        [
            "https://twitter.com/jack/status/20",
            "  https://nitter.net/someone/status/42  ",
            "https://mobile.twitter.com/m/status/7",
            "https://mirror.example.org/i/status/99",
        ]
    )

    refs = extract_identifiers(text)

    assert [r.id for r in refs] == ["20", "42", "7", "99"]
    # Source lines are trimmed but otherwise kept as given
    assert refs[1].source_url == "https://nitter.net/someone/status/42"


def test_blank_and_unmatched_lines_are_dropped():
    text = "\n\n   \nhello world\nhttps://example.com/about\nhttps://x.com/a/status/5\n"

    refs = extract_identifiers(text)

    assert [r.id for r in refs] == ["5"]


def test_output_is_unique_bounded_and_idempotent():
    text = "\n".join(
        [
            "https://x.com/a/status/1",
            "https://twitter.com/b/status/2",
            "https://x.com/c/status/1",
            "garbage",
            "",
            "https://nitter.net/d/status/3",
            "https://x.com/e/status/2?s=20",
        ]
    )
    non_blank = [line for line in text.splitlines() if line.strip()]

    first = extract_identifiers(text)
    second = extract_identifiers(text)

    assert first == second
    assert len(first) <= len(non_blank)
    ids = [r.id for r in first]
    assert ids == ["1", "2", "3"]
    assert len(set(ids)) == len(ids)
    assert all(ids)


def test_empty_input_yields_no_references():
    assert extract_identifiers("") == []
    assert extract_identifiers("just words\nmore words") == []
