"""Unit tests for core/parse.py"""

import pytest

from mdtree.core.errors import ParseError, SourceUnavailable
from mdtree.core.frontmatter import compose_document
from mdtree.core.parse import discover_files, parse_dir, parse_file, parse_string
from mdtree.core.utils.hashing import sha256


def test_parse_string_frontmatter_scalars():
    """Frontmatter scalars are typed."""
    tree = parse_string('---\ncount: 3\nprice: 3.5\nactive: TRUE\ntag: "hello"\n---\nBody')
    assert tree.frontmatter == {"count": 3, "price": 3.5, "active": True, "tag": "hello"}
    assert tree.frontmatter_raw == 'count: 3\nprice: 3.5\nactive: TRUE\ntag: "hello"'
    assert tree.body() == "Body"


def test_parse_string_plain_document():
    """No markers and no headings: one unnamed section with one level-0 block."""
    tree = parse_string("Just a paragraph.\n\nAnd another.")
    assert tree.frontmatter is None
    assert len(tree) == 1
    section = tree.section(0)
    assert section.name is None
    assert section.title == ""
    assert len(section.blocks) == 1
    assert section.blocks[0].level == 0


def test_parse_string_empty():
    """An empty document has no sections."""
    tree = parse_string("")
    assert len(tree) == 0
    assert tree.blocks() == []


def test_parse_string_hash():
    """The hash covers the full input text."""
    text = "---\na: 1\n---\nBody"
    assert parse_string(text).hash == sha256(text)


def test_sections_by_name_and_index(tree):
    """Sections are addressable by position and by first name."""
    assert [s.name for s in tree] == [None, "features", "faq"]
    assert tree.section("features").title == "Features"
    assert tree.section(1) is tree.section("features")
    assert tree.section(-1).name == "faq"
    assert tree.section(10) is None
    assert tree.section("missing") is None


def test_duplicate_section_names_first_wins():
    """Later sections with a taken name are only reachable by index."""
    tree = parse_string("<!-- section:a -->\nOne\n<!-- section:a -->\nTwo")
    assert tree.section("a").text == "One"
    assert tree.section(1).text == "Two"


def test_sample_fields_and_collections(tree):
    """Fields and derived collections are reachable from the tree."""
    features = tree.section("features")
    assert features.field("summary").text == "Fast and small."
    assert features.field("gallery").type == "images"
    assert [e.data["src"] for e in tree.images()] == ["logo.png", "one.png", "two.png"]
    assert [e.data["href"] for e in tree.links()] == ["https://example.com/docs"]
    assert [h.text for h in tree.headings()] == ["Features", "Images", "Links", "Why?", "Answer"]
    assert tree.section("faq").subsection("answer").title == "Answer"
    assert tree.lists()[0].data == {"type": "ul", "items": ["yes", "no"]}


def test_tree_is_immutable(tree):
    """Assigning to a tree attribute raises."""
    with pytest.raises(Exception):
        tree.markdown = "changed"


def test_raw_document_round_trip():
    """raw_document re-emits the fences and body."""
    text = "---\ntitle: x\n---\n\nBody\n"
    assert parse_string(text).raw_document() == text
    assert parse_string("---\n---\n").raw_document() == "---\n---\n"
    assert parse_string("No fences").raw_document() == "No fences"


def test_compose_parse_round_trip(sample_md):
    """compose -> parse -> compose is stable on frontmatter and body."""
    first = parse_string(sample_md)
    doc = compose_document(first.frontmatter, first.body())
    second = parse_string(doc)
    assert second.frontmatter == first.frontmatter
    assert second.body().strip() == first.body().strip()
    assert compose_document(second.frontmatter, second.body()) == doc


def test_discover_files_single(tmp_path):
    """discover_files returns a list with one file when given a file path."""
    f = tmp_path / "doc.md"
    f.write_text("# Hello")
    assert discover_files(f) == [f]


def test_discover_files_dir(tmp_path):
    """discover_files finds .md and .mdx files recursively and skips others."""
    (tmp_path / "a.md").write_text("a")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.mdx").write_text("b")
    (tmp_path / "notes.txt").write_text("text")
    assert discover_files(tmp_path) == [tmp_path / "a.md", tmp_path / "sub" / "b.mdx"]


def test_parse_file_sets_path_and_slug(tmp_path):
    """parse_file records the path and derives the slug from the file stem."""
    f = tmp_path / "My Notes.md"
    f.write_text("# Hello\n\nWorld\n", encoding="utf-8")
    tree = parse_file(f)
    assert tree.path == str(f)
    assert tree.slug == "my-notes"
    assert tree.section(0).title == "Hello"


def test_parse_file_slug_from_frontmatter(tmp_path):
    """A slug frontmatter value overrides the file stem."""
    f = tmp_path / "doc.md"
    f.write_text("---\nslug: custom-slug\n---\nBody\n", encoding="utf-8")
    assert parse_file(f).slug == "custom-slug"


def test_parse_file_missing(tmp_path):
    """A missing file raises SourceUnavailable carrying the path."""
    missing = tmp_path / "missing.md"
    with pytest.raises(SourceUnavailable) as exc:
        parse_file(missing)
    assert exc.value.path == missing
    assert isinstance(exc.value, ParseError)


def test_parse_file_not_utf8(tmp_path):
    """Undecodable bytes raise SourceUnavailable."""
    f = tmp_path / "bad.md"
    f.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(SourceUnavailable):
        parse_file(f)


def test_parse_dir(tmp_path):
    """parse_dir parses every discovered file in order."""
    (tmp_path / "a.md").write_text("# A")
    (tmp_path / "b.md").write_text("# B")
    trees = parse_dir(tmp_path)
    assert [t.slug for t in trees] == ["a", "b"]
