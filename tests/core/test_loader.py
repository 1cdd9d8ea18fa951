from datetime import UTC, datetime, timedelta, timezone

import pytest

from inkwell.core.exceptions import BuildFailedError, DuplicateIdentifier, MalformedDocument
from inkwell.core.loader import load_documents, parse_metadata_block, parse_source
from inkwell.core.types import DocumentStatus, RawSource


def test_parse_metadata_block_empty_text_is_empty_mapping():
    assert parse_metadata_block("") == {}
    assert parse_metadata_block("   \n") == {}


def test_parse_metadata_block_rejects_invalid_yaml():
    with pytest.raises(MalformedDocument) as exc_info:
        parse_metadata_block("title: [unclosed", "broken")

    assert exc_info.value.identifier == "broken"
    assert "invalid metadata block" in exc_info.value.problems[0]


def test_parse_metadata_block_rejects_non_mapping():
    with pytest.raises(MalformedDocument, match="must be a mapping"):
        parse_metadata_block("- just\n- a list\n", "listy")


def test_parse_source_builds_published_document(make_post):
    doc = parse_source(make_post("hello", title="Hello", tags=["cpp", "rust"], related=["other"]))

    assert doc.identifier == "hello"
    assert doc.status == DocumentStatus.PUBLISHED
    assert doc.title == "Hello"
    assert doc.tags == ("cpp", "rust")
    assert doc.related == ("other",)
    assert doc.timestamp == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_parse_source_keeps_body_verbatim(make_post):
    body = "First line\n\n  indented\n"
    assert parse_source(make_post("hello", body=body)).body == body


def test_published_document_requires_title_and_timestamp(make_source):
    with pytest.raises(MalformedDocument) as exc_info:
        parse_source(make_source("bare", tags=["x"]))

    problems = exc_info.value.problems
    assert "missing required field 'title'" in problems
    assert "missing required field 'timestamp'" in problems


def test_invalid_timestamp_is_reported_once(make_source):
    with pytest.raises(MalformedDocument) as exc_info:
        parse_source(make_source("when", title="When", timestamp="not a date"))

    assert exc_info.value.problems == ("invalid timestamp 'not a date'",)


def test_draft_needs_neither_title_nor_timestamp(make_source):
    doc = parse_source(make_source("idea", default_status=DocumentStatus.DRAFT, tags=["x"]))

    assert doc.status == DocumentStatus.DRAFT
    assert doc.title == "idea"
    assert doc.timestamp is None


def test_explicit_status_overrides_collection_default(make_source):
    doc = parse_source(make_source("wip", status="draft", title="WIP"))
    assert doc.status == DocumentStatus.DRAFT


def test_published_false_marks_document_as_draft(make_source):
    doc = parse_source(make_source("hidden", published=False, title="Hidden"))
    assert not doc.is_published


def test_unknown_status_is_malformed(make_post):
    with pytest.raises(MalformedDocument, match="unknown status"):
        parse_source(make_post("odd", status="archived"))


def test_timestamp_falls_back_to_dated_filename(make_source):
    doc = parse_source(make_source("2020-01-31-hello", title="Hello"))
    assert doc.timestamp == datetime(2020, 1, 31, tzinfo=UTC)


def test_date_field_is_accepted_as_timestamp(make_source):
    doc = parse_source(make_source("dated", title="Dated", date="2021-05-06 08:30:00 +0200"))
    assert doc.timestamp == datetime(2021, 5, 6, 8, 30, tzinfo=timezone(timedelta(hours=2)))


def test_naive_timestamp_is_taken_as_utc():
    source = RawSource(identifier="naive", metadata="title: Naive\ntimestamp: 2022-02-02 09:00:00\n")
    assert parse_source(source).timestamp == datetime(2022, 2, 2, 9, 0, tzinfo=UTC)


def test_space_separated_tags_and_duplicates(make_post):
    doc = parse_source(make_post("tags", tags="cpp  rust cpp"))
    assert doc.tags == ("cpp", "rust")


def test_category_and_categories_are_merged(make_post):
    doc = parse_source(make_post("cats", categories=["news"], category="release"))
    assert doc.categories == ("news", "release")


def test_tags_must_be_list_or_string(make_post):
    with pytest.raises(MalformedDocument, match="'tags' must be a list"):
        parse_source(make_post("badtags", tags={"a": 1}))


def test_single_related_string_becomes_one_token(make_post):
    assert parse_source(make_post("one", related="other")).related == ("other",)


def test_permalink_override_must_be_non_empty(make_post):
    with pytest.raises(MalformedDocument, match="'permalink' must be a non-empty string"):
        parse_source(make_post("empty-link", permalink="  "))


def test_unknown_fields_are_kept_as_extra(make_post):
    doc = parse_source(make_post("extra", layout="post", comments=True))
    assert doc.extra == {"layout": "post", "comments": True}


def test_load_documents_preserves_source_order(make_post):
    sources = [make_post("c", 3), make_post("a", 1), make_post("b", 2)]

    documents = load_documents(sources, max_workers=2)

    assert [doc.identifier for doc in documents] == ["c", "a", "b"]


def test_load_documents_collects_every_error(make_post, make_source):
    sources = [
        make_post("good"),
        make_source("no-title", timestamp="2024-01-01"),
        make_source("bad-yaml-free", title="T", timestamp="nope"),
        make_post("twin"),
        make_post("twin"),
    ]

    with pytest.raises(BuildFailedError) as exc_info:
        load_documents(sources)

    failure = exc_info.value
    assert failure.stage == "load"
    malformed = {e.identifier for e in failure.errors if isinstance(e, MalformedDocument)}
    duplicates = [e for e in failure.errors if isinstance(e, DuplicateIdentifier)]
    assert malformed == {"no-title", "bad-yaml-free"}
    assert len(duplicates) == 1
    assert duplicates[0].identifier == "twin"
    assert duplicates[0].count == 2


def test_load_documents_empty_input():
    assert load_documents([]) == ()


@pytest.mark.parametrize("metadata", ["title: Bad\ntimestamp: 2024-02-30\n", "title: Bad\ndate: 2024-01-01 25:00:00\n"])
def test_impossible_yaml_date_is_malformed(metadata):
    with pytest.raises(MalformedDocument, match="invalid metadata block"):
        parse_source(RawSource(identifier="bad", metadata=metadata))


def test_impossible_date_is_batched_with_other_errors():
    sources = [
        RawSource(identifier="bad", metadata="title: Bad\ntimestamp: 2024-02-30\n"),
        RawSource(identifier="other", metadata="title: Other\n"),
    ]

    with pytest.raises(BuildFailedError) as exc_info:
        load_documents(sources)

    errors = exc_info.value.errors
    assert exc_info.value.stage == "load"
    assert all(isinstance(e, MalformedDocument) for e in errors)
    assert sorted(e.identifier for e in errors) == ["bad", "other"]


def test_undecodable_source_is_malformed():
    source = RawSource(identifier="bin", read_error="not valid UTF-8 (invalid start byte at byte 0)")

    with pytest.raises(MalformedDocument) as exc_info:
        parse_source(source)

    assert exc_info.value.problems == ("not valid UTF-8 (invalid start byte at byte 0)",)
