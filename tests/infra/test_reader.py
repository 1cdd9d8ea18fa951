from inkwell.core.config import PathsSettings
from inkwell.core.types import DocumentStatus
from inkwell.infra.reader import discover_sources, identifier_for, iter_content_files, split_front_matter


def test_split_front_matter():
    metadata, body = split_front_matter("---\ntitle: Hello\n---\n\nBody text\n")
    assert metadata.strip() == "title: Hello"
    assert body == "Body text\n"


def test_text_without_front_matter_is_all_body():
    assert split_front_matter("Just text\n") == ("", "Just text\n")


def test_unterminated_front_matter_is_all_body(caplog):
    text = "---\ntitle: Hello\nno closing fence\n"
    assert split_front_matter(text) == ("", text)
    assert "Unterminated front matter" in caplog.text


def test_identifier_is_relative_posix_path_without_suffix(tmp_path):
    path = tmp_path / "notes" / "2020-01-01-hello.md"
    assert identifier_for(path, tmp_path) == "notes/2020-01-01-hello"


def test_iter_content_files_is_sorted_and_skips_hidden(tmp_path):
    for name in ["b.md", "a.markdown", "c.html", "skip.txt", ".hidden.md", ".git/d.md", "sub/e.md"]:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x")

    files = [p.relative_to(tmp_path).as_posix() for p in iter_content_files(tmp_path)]

    assert files == ["a.markdown", "b.md", "c.html", "sub/e.md"]


def test_iter_content_files_missing_directory(tmp_path):
    assert iter_content_files(tmp_path / "absent") == []


def test_discover_sources_assigns_default_status(site_root, write_post):
    write_post(site_root / "_posts", "2024-01-01-live", "Live body\n", title="Live")
    write_post(site_root / "_drafts", "idea", "Draft body\n", title="Idea")

    sources = discover_sources(PathsSettings(site_root=site_root))

    by_id = {source.identifier: source for source in sources}
    assert by_id["2024-01-01-live"].default_status == DocumentStatus.PUBLISHED
    assert by_id["idea"].default_status == DocumentStatus.DRAFT
    assert by_id["idea"].body == "Draft body\n"
    assert by_id["idea"].origin == str(site_root / "_drafts" / "idea.md")


def test_discover_sources_can_skip_drafts(site_root, write_post):
    write_post(site_root / "_drafts", "idea", title="Idea")
    assert discover_sources(PathsSettings(site_root=site_root), include_drafts=False) == ()


def test_undecodable_file_becomes_source_with_read_error(site_root):
    (site_root / "_posts" / "bin.md").write_bytes(b"\xff\xfe---\n")

    (source,) = discover_sources(PathsSettings(site_root=site_root))

    assert source.identifier == "bin"
    assert source.read_error.startswith("not valid UTF-8")
    assert source.metadata == ""
