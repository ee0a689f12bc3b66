from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_TAG = "blockquote"


def _remove_quote_containers(node: Tag, quote_tag: str) -> int:
    removed = 0
    child = node.contents[0] if node.contents else None
    while child is not None:
        following = child.next_sibling
        if isinstance(child, Tag):
            if child.name == quote_tag:
                child.decompose()
                removed += 1
            else:
                removed += _remove_quote_containers(child, quote_tag)
        child = following
    return removed


def strip_quoted_markup(markup: str, *, quote_tag: str = DEFAULT_QUOTE_TAG) -> str:
    """Remove every ``quote_tag`` element and its subtree from ``markup``.

    Fails open: if the document cannot be parsed, walked or serialized, the
    original markup is returned. Markup without quote containers is returned
    unchanged rather than re-serialized.
    """
    if not markup:
        return markup

    try:
        soup = BeautifulSoup(markup, "html.parser")
        removed = _remove_quote_containers(soup, quote_tag.lower())
        if not removed:
            return markup
        stripped = str(soup)
    except (ParserRejectedMarkup, RecursionError) as exc:
        logger.warning(
            "Returning unfiltered markup after quote strip failure",
            extra={"event": "markup_quote_strip_failed", "markup_chars": len(markup), "error": repr(exc)},
        )
        return markup

    logger.debug(
        "Stripped quoted-reply containers from markup",
        extra={
            "event": "markup_quotes_stripped",
            "quote_tag": quote_tag,
            "removed": removed,
            "markup_chars": len(markup),
            "stripped_chars": len(stripped),
        },
    )
    return stripped
