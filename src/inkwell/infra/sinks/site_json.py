"""JSON Output Sink for the resolved site model."""

import json
from pathlib import Path
from typing import Any

from inkwell.core.types import Page, SiteModel


def _page_to_dict(page: Page) -> dict[str, Any]:
    return {
        "index": page.index,
        "offset": page.offset,
        "size": page.size,
        "total_pages": page.total_pages,
        "url": page.url,
        "previous": page.previous,
        "next": page.next,
        "previous_url": page.previous_url,
        "next_url": page.next_url,
        "items": [doc.identifier for doc in page.items],
    }


def site_to_dict(model: SiteModel) -> dict[str, Any]:
    """Project the site model to plain data.

    Listings refer to documents by identifier; each document appears once,
    under ``documents``.
    """
    return {
        "documents": [doc.model_dump(mode="json") for doc in model.documents],
        "references": [list(edge) for edge in model.graph.edges],
        "tags": model.tags.identifiers(),
        "categories": model.categories.identifiers(),
        "pages": [_page_to_dict(page) for page in model.pages],
        "feed": model.feed.model_dump(mode="json", exclude={"generated_at"}),
    }


class SiteJSONSink:
    """Writes ``site.json`` with sorted keys so identical builds match byte for byte."""

    filename = "site.json"

    def write(self, model: SiteModel, directory: Path) -> Path:
        output_path = directory / self.filename
        output_path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(site_to_dict(model), indent=2, sort_keys=True, ensure_ascii=False, default=str)
        output_path.write_text(payload + "\n", encoding="utf-8")
        return output_path
