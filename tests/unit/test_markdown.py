# tests/unit/test_markdown.py
from app.utils import markdown
from app.utils.markdown import render_markdown, sanitize_html


def test_renders_basic_markdown():
    html = render_markdown("# Title\n\n**bold** and *soft*\n\n- one\n- two")
    assert "<h1>Title</h1>" in html
    assert "<strong>bold</strong>" in html
    assert "<em>soft</em>" in html
    assert "<ul>" in html and "<li>one</li>" in html


def test_script_is_removed_with_its_content():
    html = render_markdown("Hello <script>alert('x')</script> world")
    assert "<script" not in html
    assert "alert" not in html
    assert "Hello" in html and "world" in html


def test_disallowed_tags_are_stripped_not_escaped():
    html = render_markdown('<div onclick="evil()">inside</div>\n\n<img src=x onerror=alert(1)>')
    assert "inside" in html
    assert "<div" not in html and "&lt;div" not in html
    assert "<img" not in html and "onerror" not in html


def test_links_keep_text_only():
    html = render_markdown("[click](https://example.com)")
    assert "click" in html
    assert "example.com" not in html
    assert "<a" not in html


def test_rendering_is_deterministic():
    text = "Some `code` and > a quote"
    assert render_markdown(text) == render_markdown(text)


def test_empty_input():
    assert render_markdown("") == ""


def test_falls_back_to_sanitized_text_on_render_error(monkeypatch):
    class BrokenParser:
        def render(self, text):
            raise RuntimeError("boom")

    monkeypatch.setattr(markdown, "_md", BrokenParser())
    html = render_markdown("plain <b>bold</b> <script>x()</script>")
    assert html.strip() == "plain bold"


def test_sanitize_drops_comments_and_styles():
    html = sanitize_html("<p>ok<!-- hidden --></p><style>p{}</style>")
    assert html == "<p>ok</p>"
