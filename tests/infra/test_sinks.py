import json
from dataclasses import replace
from pathlib import Path

import pytest
from defusedxml import ElementTree

from inkwell.core.exceptions import OutputError
from inkwell.core.pipeline import run_build
from inkwell.core.ports import OutputSink
from inkwell.infra.sinks import AtomFeedSink, SiteJSONSink, default_sinks, publish_site
from inkwell.infra.sinks.atom import ATOM_NS, feed_id, feed_to_xml_string
from inkwell.infra.sinks.site_json import site_to_dict

NS = {"atom": ATOM_NS}


@pytest.fixture
def model(make_post, context):
    sources = [
        make_post("a", day=1, tags=["cpp"], related=["b"], body="First & <escaped> body"),
        make_post("b", day=2, tags=["cpp", "rust"], categories=["news"]),
    ]
    return run_build(sources, context).model


class FailingSink:
    filename = "broken.txt"

    def write(self, model, directory: Path) -> Path:
        raise OSError("disk full")


def test_sinks_satisfy_the_protocol():
    assert all(isinstance(sink, OutputSink) for sink in default_sinks())


def test_site_dict_refers_to_documents_by_identifier(model):
    data = site_to_dict(model)

    assert [doc["identifier"] for doc in data["documents"]] == ["b", "a"]
    assert data["references"] == [["a", "b"]]
    assert data["tags"] == {"cpp": ["b", "a"], "rust": ["b"]}
    assert data["categories"] == {"news": ["b"]}
    assert data["pages"][0]["items"] == ["b", "a"]
    assert "generated_at" not in data["feed"]


def test_site_json_is_stable(model, tmp_path):
    first = SiteJSONSink().write(model, tmp_path / "one").read_text()
    second = SiteJSONSink().write(model, tmp_path / "two").read_text()

    assert first == second
    assert json.loads(first)["documents"][0]["permalink"] == "/2024/01/02/b.html"


def test_atom_feed_parses_and_lists_entries(model):
    xml = feed_to_xml_string(model.feed)
    root = ElementTree.fromstring(xml.encode("utf-8"))

    assert root.tag == f"{{{ATOM_NS}}}feed"
    assert root.find("atom:title", NS).text == model.feed.title
    entries = root.findall("atom:entry", NS)
    assert [e.find("atom:title", NS).text for e in entries] == ["B", "A"]
    assert [c.get("term") for c in entries[0].findall("atom:category", NS)] == ["cpp", "rust"]
    assert entries[1].find("atom:summary", NS).text == "First & <escaped> body"
    assert entries[0].find("atom:updated", NS).text == "2024-01-02T10:00:00Z"


def test_feed_id_prefers_site_url(model):
    assert feed_id(model.feed).startswith("urn:inkwell:")
    assert feed_id(model.feed.model_copy(update={"site_url": "https://example.com"})) == "https://example.com/"


def test_atom_sink_writes_feed_xml(model, tmp_path):
    path = AtomFeedSink().write(model, tmp_path)
    assert path.name == "feed.xml"
    assert path.read_text().startswith("<?xml")


def test_publish_site_writes_all_artifacts(model, tmp_path):
    output = tmp_path / "_site"

    written = publish_site(model, output)

    assert sorted(p.name for p in written) == ["feed.xml", "site.json"]
    assert all(p.parent == output and p.exists() for p in written)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["_site"]


def test_publish_site_replaces_previous_output(model, tmp_path):
    output = tmp_path / "_site"
    output.mkdir()
    (output / "stale.html").write_text("old")

    publish_site(model, output)

    assert not (output / "stale.html").exists()
    assert (output / "site.json").exists()


def test_failing_sink_leaves_previous_output_intact(model, tmp_path):
    output = tmp_path / "_site"
    output.mkdir()
    (output / "site.json").write_text("previous build")

    with pytest.raises(OutputError, match="disk full"):
        publish_site(model, output, sinks=[SiteJSONSink(), FailingSink()])

    assert (output / "site.json").read_text() == "previous build"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["_site"]


def test_entry_ids_are_absolute_without_site_url(model):
    root = ElementTree.fromstring(feed_to_xml_string(model.feed).encode("utf-8"))

    ids = [entry.find("atom:id", NS).text for entry in root.findall("atom:entry", NS)]

    assert ids == ["urn:inkwell:b", "urn:inkwell:a"]


def test_entry_ids_use_urls_with_site_url(make_post, context):
    config = context.config.model_copy(update={"site": context.config.site.model_copy(update={"url": "https://example.com"})})
    model = run_build([make_post("a")], replace(context, config=config)).model

    root = ElementTree.fromstring(feed_to_xml_string(model.feed).encode("utf-8"))

    assert root.find("atom:entry/atom:id", NS).text == "https://example.com/2024/01/01/a.html"
