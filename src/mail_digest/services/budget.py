from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from mail_digest.services.email_parser import BodyNormalizer
from mail_digest.services.truncation import TRUNCATION_MARKER, truncate_body

logger = logging.getLogger(__name__)

ITEM_SEPARATOR = "\n---\n\n"


@dataclass(frozen=True)
class Item:
    header: str
    plain_body: str | None = None
    html_body: str | None = None


@dataclass(frozen=True)
class AllocationResult:
    text: str
    included: int
    omitted: int

    @property
    def total(self) -> int:
        return self.included + self.omitted

    def as_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "included": self.included,
            "omitted": self.omitted,
        }


def format_advisory(omitted: int, total: int, budget: int) -> str:
    return (
        f"\n\n--- TRUNCATED: {omitted} of {total} emails omitted "
        f"(response would exceed {budget} chars). Fetch fewer emails per call. ---\n"
    )


def allocate_response(
    items: Sequence[Item],
    total_budget: int,
    normalizer: BodyNormalizer | None = None,
    *,
    marker: str = TRUNCATION_MARKER,
) -> AllocationResult:
    """Render ``items`` in order under one shared character budget.

    Each body is truncated to whatever budget is left after its header.
    Once a header no longer fits, that item and every later one are omitted
    and an advisory is appended. Room for the advisory is held back from
    every item but the last, so the output never exceeds
    ``total_budget + len(marker)`` characters.
    """
    normalizer = normalizer or BodyNormalizer(marker=marker)
    total = len(items)
    reserve = len(format_advisory(total, total, total_budget))
    remaining = max(0, total_budget - reserve)

    parts: list[str] = []
    written = 0
    included = 0

    for index, item in enumerate(items):
        header = item.header if index == 0 else ITEM_SEPARATOR + item.header
        if index == total - 1:
            # no advisory can follow the last item
            body_limit = total_budget - written - len(header)
        else:
            body_limit = remaining - len(header)
        if body_limit <= 0:
            omitted = total - included
            advisory = truncate_body(
                format_advisory(omitted, total, total_budget),
                total_budget + len(marker) - written,
                marker=marker,
            )
            parts.append(advisory)
            logger.info(
                "Response budget exhausted; omitting remaining emails",
                extra={
                    "event": "response_budget_exhausted",
                    "included": included,
                    "omitted": omitted,
                    "total": total,
                    "budget": total_budget,
                },
            )
            return AllocationResult("".join(parts), included, omitted)

        body = truncate_body(normalizer.normalize(item), body_limit, marker=marker)
        parts.append(header)
        parts.append(body)
        written += len(header) + len(body)
        remaining = max(0, remaining - len(header) - len(body))
        included += 1

    return AllocationResult("".join(parts), included, 0)
