"""Render untrusted markdown into a sanitized HTML fragment."""
import logging
import re

import bleach
from markdown_it import MarkdownIt

logger = logging.getLogger("complaintdesk.markdown")


# Raw HTML passes through to the sanitizer
_md = MarkdownIt("commonmark", {"html": True})

ALLOWED_TAGS = [
    "p",
    "br",
    "strong",
    "em",
    "ul",
    "ol",
    "li",
    "h1",
    "h2",
    "h3",
    "code",
    "pre",
    "blockquote",
]

ALLOWED_ATTRIBUTES = {
    "a": ["href", "target", "rel"],
}

# Elements whose text content is dropped together with the tag
_STRIP_WITH_CONTENT = ("script", "style")


def sanitize_html(html: str) -> str:
    cleaner = bleach.Cleaner(
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
        strip_comments=True,
    )
    return cleaner.clean(_drop_dangerous_blocks(html))


def _drop_dangerous_blocks(html: str) -> str:
    # bleach strips disallowed tags but keeps their inner text
    for tag in _STRIP_WITH_CONTENT:
        html = re.sub(
            rf"<{tag}\b[^>]*>.*?</{tag}\s*>",
            "",
            html,
            flags=re.IGNORECASE | re.DOTALL,
        )
    return html


def render_markdown(text: str) -> str:
    """Render markdown then sanitize; on render failure sanitize the raw text."""
    try:
        rendered = _md.render(text or "")
    except Exception:
        logger.exception("Markdown processing error")
        return sanitize_html(text or "")
    return sanitize_html(rendered)
