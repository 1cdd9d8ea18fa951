"""Atom feed serialization, as produced by jekyll-feed."""

from pathlib import Path
from xml.etree.ElementTree import Element, SubElement, tostring

from inkwell.core.types import Feed, FeedEntry, SiteModel, format_iso_utc
from inkwell.core.utils import slugify

ATOM_NS = "http://www.w3.org/2005/Atom"


def feed_id(feed: Feed) -> str:
    if feed.site_url:
        return feed.site_url.rstrip("/") + "/"
    return f"urn:inkwell:{slugify(feed.title)}"


def entry_id(entry: FeedEntry) -> str:
    """Absolute IRI for an entry: its URL when the site URL is known."""
    if entry.url.startswith(("http://", "https://")):
        return entry.url
    return f"urn:inkwell:{entry.identifier}"


def feed_to_xml_string(feed: Feed, *, self_href: str | None = None) -> str:
    """Serialize a Feed to an Atom XML string.

    Only fields derived from the documents are written, so two builds of the
    same content produce identical XML.
    """
    root = Element("feed", attrib={"xmlns": ATOM_NS})
    SubElement(root, "generator").text = "Inkwell"
    SubElement(root, "id").text = feed_id(feed)
    SubElement(root, "title").text = feed.title
    SubElement(root, "updated").text = format_iso_utc(feed.updated)

    if feed.site_url:
        SubElement(root, "link", attrib={"href": feed.site_url, "rel": "alternate", "type": "text/html"})
    if self_href:
        SubElement(root, "link", attrib={"href": self_href, "rel": "self", "type": "application/atom+xml"})

    if feed.author:
        author_el = SubElement(root, "author")
        SubElement(author_el, "name").text = feed.author

    for entry in feed.entries:
        entry_el = SubElement(root, "entry")
        SubElement(entry_el, "id").text = entry_id(entry)
        SubElement(entry_el, "title").text = entry.title
        SubElement(entry_el, "link", attrib={"href": entry.url, "rel": "alternate", "type": "text/html"})
        SubElement(entry_el, "published").text = format_iso_utc(entry.timestamp)
        SubElement(entry_el, "updated").text = format_iso_utc(entry.timestamp)

        for tag in entry.tags:
            SubElement(entry_el, "category", attrib={"term": tag})

        if entry.summary:
            summary_el = SubElement(entry_el, "summary")
            summary_el.text = entry.summary
            summary_el.set("type", "text")

    return "<?xml version='1.0' encoding='UTF-8'?>\n" + tostring(root, encoding="unicode")


class AtomFeedSink:
    """Writes the site feed as an Atom XML file."""

    filename = "feed.xml"

    def write(self, model: SiteModel, directory: Path) -> Path:
        self_href = f"{model.feed.site_url.rstrip('/')}/{self.filename}" if model.feed.site_url else None
        output_path = directory / self.filename
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(feed_to_xml_string(model.feed, self_href=self_href), encoding="utf-8")
        return output_path
