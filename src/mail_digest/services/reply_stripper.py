from __future__ import annotations

import logging
import re
from typing import Protocol, Sequence

from mailparser_reply import EmailReplyParser

logger = logging.getLogger(__name__)

_QUOTE_MARKERS = (
    "-----Original Message-----",
    "________________________________",
)
_ON_WROTE_RE = re.compile(r"^On .+ wrote:$")
_HEADER_FIELD_RE = re.compile(r"^(Sent|Date|To|Cc|Subject):", re.IGNORECASE)
_SIGNATURE_RE = re.compile(r"^(--\s*|Sent from my .+)$")
_FORWARDED_MARKER_RE = re.compile(
    r"^[ \t]*(?:-{2,}[ \t]*Forwarded message[ \t]*-{2,}|Begin forwarded message:)[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
_HEADER_BLOCK_LOOKAHEAD = 4


class ReplyStripper(Protocol):
    def strip(self, text: str) -> str: ...


def split_forwarded(text: str) -> tuple[str, str]:
    """Split ``text`` at the first unquoted forwarded-message marker line."""
    match = _FORWARDED_MARKER_RE.search(text)
    if not match:
        return text, ""
    return text[: match.start()], text[match.start() :]


def _starts_header_block(lines: list[str], index: int) -> bool:
    following = [line.strip() for line in lines[index + 1 : index + 1 + _HEADER_BLOCK_LOOKAHEAD]]
    return any(_HEADER_FIELD_RE.match(line) for line in following if line)


class HeuristicReplyStripper:
    """Line-based cut at the first quoted-reply or signature marker."""

    def strip(self, text: str) -> str:
        lines = (text or "").replace("\r", "").split("\n")
        kept: list[str] = []

        for index, line in enumerate(lines):
            stripped = line.strip()

            if stripped.startswith(">"):
                break
            if any(stripped.startswith(marker) for marker in _QUOTE_MARKERS):
                break
            if _ON_WROTE_RE.match(stripped):
                break
            if stripped.startswith("From:") and _starts_header_block(lines, index):
                break
            if _SIGNATURE_RE.match(line.rstrip()):
                break

            kept.append(line.rstrip())

        result = "\n".join(kept).strip()
        return re.sub(r"\n{3,}", "\n\n", result)


class MailParserReplyStripper:
    """Reply stripping backed by the ``mail-parser-reply`` library."""

    def __init__(self, languages: Sequence[str] = ("en",)) -> None:
        self.languages = list(languages) or ["en"]

    def strip(self, text: str) -> str:
        if not text.strip():
            return text
        try:
            parsed = EmailReplyParser(languages=self.languages).parse_reply(text=text)
        except Exception as exc:
            logger.warning(
                "Reply parser failed; keeping unstripped text",
                extra={"event": "reply_parser_failed", "text_chars": len(text), "error": repr(exc)},
            )
            return text
        return parsed or ""


class ForwardedBlockGuard:
    """Keeps forwarded-message blocks out of reach of the wrapped stripper.

    Only the text before the first forwarded marker is stripped; the
    forwarded block is re-attached verbatim. When stripping leaves nothing
    and no forwarded block exists, the input is returned unchanged.
    """

    def __init__(self, inner: ReplyStripper) -> None:
        self.inner = inner

    def strip(self, text: str) -> str:
        head, forwarded = split_forwarded(text)
        kept = self.inner.strip(head) if head.strip() else ""

        if not forwarded:
            return kept if kept.strip() else text
        if not kept.strip():
            return forwarded
        return f"{kept.rstrip()}\n\n{forwarded}"


def build_reply_stripper(name: str = "mailparser", languages: Sequence[str] = ("en",)) -> ReplyStripper:
    normalized = (name or "").strip().lower()
    if normalized == "mailparser":
        return ForwardedBlockGuard(MailParserReplyStripper(languages))
    if normalized == "heuristic":
        return ForwardedBlockGuard(HeuristicReplyStripper())
    raise ValueError(f"Unknown reply stripper '{name}' (expected 'mailparser' or 'heuristic')")
