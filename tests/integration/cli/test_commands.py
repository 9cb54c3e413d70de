"""Integration tests for the parse, show and fmt commands"""

import json

from typer.testing import CliRunner

from mdtree.cli.cli import app


DOC = """\
---
b: 2
a: 1
---
<!-- section:intro -->
# Hello

<!-- lead -->World

![Logo](logo.png)



Done.
"""

runner = CliRunner()


def test_parse_cmd_writes_sidecars(tmp_path, monkeypatch):
    """parse writes one JSON sidecar per document, mirroring the source tree."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "docs" / "guide").mkdir(parents=True)
    (tmp_path / "docs" / "guide" / "hello.md").write_text(DOC)

    result = runner.invoke(app, [
        "parse", "docs",
        "--out-dir", str(tmp_path / "dist"),
        "--image-base-url", "https://cdn.example.com/img",
    ])

    assert result.exit_code == 0, result.output
    sidecar = json.loads((tmp_path / "dist" / "guide" / "hello.json").read_text())
    assert sidecar["slug"] == "hello"
    assert sidecar["frontmatter"] == {"b": 2, "a": 1}
    section = sidecar["sections"][0]
    assert section["name"] == "intro"
    assert section["fields"]["lead"]["text"] == "World"
    assert section["images"] == [{"src": "https://cdn.example.com/img/logo.png", "alt": "Logo"}]
    assert "Parsed 1 document(s)" in result.output


def test_parse_cmd_missing_path(tmp_path, monkeypatch):
    """A missing path fails with exit code 1 and an error message."""
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["parse", "nope.md"])
    assert result.exit_code == 1
    assert "Path not found" in result.output


def test_parse_cmd_no_markdown(tmp_path, monkeypatch):
    """A directory without markdown files fails."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "notes.txt").write_text("x")
    result = runner.invoke(app, ["parse", "."])
    assert result.exit_code == 1


def test_show_cmd_outline(tmp_path, monkeypatch):
    """show prints the section outline."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "hello.md").write_text(DOC)
    result = runner.invoke(app, ["show", "hello.md"])
    assert result.exit_code == 0, result.output
    assert "section:intro - Hello" in result.output
    assert "# Hello  [lead]" in result.output


def test_show_cmd_json(tmp_path, monkeypatch):
    """show --json prints the sidecar."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "hello.md").write_text(DOC)
    result = runner.invoke(app, ["show", "hello.md", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["sections"][0]["title"] == "Hello"


def test_fmt_check_then_write(tmp_path, monkeypatch):
    """fmt --check reports changes without writing; fmt rewrites; a second check passes."""
    monkeypatch.chdir(tmp_path)
    doc = tmp_path / "hello.md"
    doc.write_text(DOC)

    result = runner.invoke(app, ["fmt", "hello.md", "--check"])
    assert result.exit_code == 1
    assert "would reformat: hello.md" in result.output
    assert doc.read_text() == DOC

    result = runner.invoke(app, ["fmt", "hello.md"])
    assert result.exit_code == 0, result.output
    formatted = doc.read_text()
    assert formatted.startswith("---\nb: 2\na: 1\n---\n\n<!-- section:intro -->")
    assert "\n\n\n" not in formatted

    result = runner.invoke(app, ["fmt", "hello.md", "--check"])
    assert result.exit_code == 0, result.output


def test_fmt_sort_keys_diff(tmp_path, monkeypatch):
    """fmt --diff --sort-keys prints a diff and leaves the file alone."""
    monkeypatch.chdir(tmp_path)
    doc = tmp_path / "hello.md"
    doc.write_text(DOC)

    result = runner.invoke(app, ["fmt", "hello.md", "--diff", "--sort-keys"])
    assert result.exit_code == 0, result.output
    assert "+++ hello.md (formatted)" in result.output
    assert "@@" in result.output
    assert doc.read_text() == DOC
