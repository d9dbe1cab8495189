# tests/test_render.py
from app.services.render import render_browser
from app.services.volume import DirEntry, EditDocument


def test_root_listing_has_no_parent_row():
    html = render_browser("/", [])
    assert "fa-arrow-left" not in html
    assert "Volume File Manager" in html


def test_listing_rows():
    entries = [
        DirEntry(name="world", is_dir=True),
        DirEntry(name="backup.zip", is_dir=False, size=2048, ext=".zip"),
        DirEntry(name="server.properties", is_dir=False, size=12, ext=".properties"),
    ]
    html = render_browser("/srv data", entries, title="MC Manager")
    assert "MC Manager" in html
    assert 'href="/"' in html
    assert 'href="/srv%20data/world/"' in html
    assert "2048 B" in html
    assert html.count("extractZip(") == 2  # one button plus the function definition
    assert "/srv%20data?edit=server.properties" in html


def test_names_are_escaped():
    html = render_browser("/", [DirEntry(name="<img src=x>", is_dir=False, size=1)])
    assert "<img src=x>" not in html
    assert "&lt;img src=x&gt;" in html


def test_editor_embeds_content_as_json():
    doc = EditDocument(name="motd.txt", content="</script><script>alert(1)</script>")
    html = render_browser("/", [], edit=doc)
    assert "Editing: motd.txt" in html
    assert "alert(1)</script>" not in html
    assert "\\u003c/script\\u003e" in html


def test_script_urls_use_the_quoted_directory():
    html = render_browser("/maps#1?old", [DirEntry(name="a.txt", is_dir=False)])
    assert 'const basePath = "/maps%231%3Fold";' in html
    assert 'const basePath = "/maps#1?old";' not in html
