from __future__ import annotations

import html
import re

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

_PARAGRAPH_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "dl",
        "fieldset",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    }
)
_LINE_TAGS = frozenset(
    {"caption", "dd", "div", "dt", "figcaption", "li", "tbody", "tfoot", "thead", "tr"}
)
_CELL_TAGS = frozenset({"td", "th"})
_SKIPPED_TAGS = frozenset(
    {
        "area",
        "audio",
        "canvas",
        "embed",
        "head",
        "iframe",
        "img",
        "input",
        "map",
        "meta",
        "noscript",
        "object",
        "script",
        "select",
        "style",
        "svg",
        "template",
        "title",
        "video",
    }
)
_NON_TEXT_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PARAGRAPH_END_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_HTML_WS_RE = re.compile(r"[ \t\r\n\f]+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_WS_XLAT = {
    0x00A0: " ",
    0x2007: " ",
    0x202F: " ",
    0x200B: "",
    0x200C: "",
    0x200D: "",
    0xFEFF: "",
}


def _at_line_start(parts: list[str]) -> bool:
    return not parts or parts[-1].endswith("\n")


def _append_text(parts: list[str], text: str, preformatted: bool) -> None:
    if not preformatted:
        text = _HTML_WS_RE.sub(" ", text)
        if _at_line_start(parts):
            text = text.lstrip(" ")
    if text:
        parts.append(text)


def _collect(node: Tag, parts: list[str], preformatted: bool) -> None:
    for child in node.children:
        if isinstance(child, _NON_TEXT_STRINGS):
            continue
        if isinstance(child, NavigableString):
            _append_text(parts, str(child), preformatted)
            continue
        if not isinstance(child, Tag):
            continue

        name = child.name
        if name in _SKIPPED_TAGS:
            continue
        if name == "br":
            parts.append("\n")
            continue

        if name in _PARAGRAPH_TAGS:
            breaker = "\n\n"
        elif name in _LINE_TAGS:
            breaker = "\n"
        else:
            breaker = ""

        if breaker and not _at_line_start(parts):
            parts.append("\n")
        _collect(child, parts, preformatted or name == "pre")
        if breaker:
            parts.append(breaker)
        elif name in _CELL_TAGS:
            parts.append(" ")


def _tidy(text: str) -> str:
    text = text.translate(_WS_XLAT)
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    return _BLANK_RUN_RE.sub("\n\n", text).strip()


def _strip_tags(markup: str) -> str:
    text = _BR_RE.sub("\n", markup)
    text = _PARAGRAPH_END_RE.sub("\n\n", text)
    text = _TAG_RE.sub("", text)
    return html.unescape(text)


def render_plain_text(markup: str) -> str:
    """Render HTML as plain text: blocks become line breaks, markup is dropped."""
    if not markup:
        return ""

    try:
        soup = BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup:
        return _tidy(_strip_tags(markup))

    parts: list[str] = []
    try:
        _collect(soup, parts, False)
    except RecursionError:
        return _tidy(soup.get_text("\n"))
    return _tidy("".join(parts))
