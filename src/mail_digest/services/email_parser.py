from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mail_digest.config import DEFAULT_SINGLE_BODY_CHAR_LIMIT, positive_or_default
from mail_digest.services.html_text import render_plain_text
from mail_digest.services.markup_quotes import DEFAULT_QUOTE_TAG, strip_quoted_markup
from mail_digest.services.reply_stripper import ReplyStripper, build_reply_stripper
from mail_digest.services.truncation import TRUNCATION_MARKER, truncate_body

if TYPE_CHECKING:
    from mail_digest.config import Settings
    from mail_digest.services.budget import Item

logger = logging.getLogger(__name__)

NO_CONTENT_PLACEHOLDER = "(no body content)"


class BodyKind(enum.Enum):
    PLAIN_TEXT = "text/plain"
    HTML = "text/html"


@dataclass(frozen=True)
class RawBody:
    kind: BodyKind
    content: str


def select_raw_body(item: "Item") -> RawBody | None:
    if item.plain_body is not None:
        return RawBody(BodyKind.PLAIN_TEXT, item.plain_body)
    if item.html_body is not None:
        return RawBody(BodyKind.HTML, item.html_body)
    return None


class BodyNormalizer:
    """Turns one email's raw body into bounded plain text."""

    def __init__(
        self,
        reply_stripper: ReplyStripper | None = None,
        *,
        single_body_char_limit: int = DEFAULT_SINGLE_BODY_CHAR_LIMIT,
        quote_tag: str = DEFAULT_QUOTE_TAG,
        marker: str = TRUNCATION_MARKER,
        placeholder: str = NO_CONTENT_PLACEHOLDER,
    ) -> None:
        self.reply_stripper = reply_stripper or build_reply_stripper()
        self.single_body_char_limit = positive_or_default(single_body_char_limit, DEFAULT_SINGLE_BODY_CHAR_LIMIT)
        self.quote_tag = quote_tag
        self.marker = marker
        self.placeholder = placeholder

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BodyNormalizer":
        return cls(
            build_reply_stripper(settings.reply_stripper, settings.reply_languages),
            single_body_char_limit=settings.body_char_limit,
            quote_tag=settings.quote_container_tag,
            marker=settings.truncation_marker,
            placeholder=settings.no_content_placeholder,
        )

    def normalize(self, item: "Item") -> str:
        return self.normalize_raw(select_raw_body(item))

    def normalize_raw(self, raw: RawBody | None) -> str:
        if raw is None:
            text = ""
        elif raw.kind is BodyKind.HTML:
            filtered = strip_quoted_markup(raw.content, quote_tag=self.quote_tag)
            text = self.reply_stripper.strip(render_plain_text(filtered))
        else:
            text = self.reply_stripper.strip(raw.content)

        if not text.strip():
            text = self.placeholder

        body = truncate_body(text, self.single_body_char_limit, marker=self.marker)
        logger.debug(
            "Normalized email body",
            extra={
                "event": "body_normalized",
                "body_kind": raw.kind.value if raw else None,
                "raw_chars": len(raw.content) if raw else 0,
                "body_chars": len(body),
                "truncated": body != text,
            },
        )
        return body
