import logging
from email.utils import formataddr
from typing import TYPE_CHECKING, Any

from mail_digest.config import positive_or_default
from mail_digest.services.budget import Item, allocate_response
from mail_digest.services.email_parser import BodyNormalizer
from mail_digest.services.jmap_payloads import EmailGetResponse, MethodError, MethodResponse

if TYPE_CHECKING:
    from mail_digest.config import Settings

logger = logging.getLogger(__name__)


def format_address_list(addresses: list[dict[str, Any]] | None) -> str:
    formatted = []
    for address in addresses or []:
        email_address = (address.get("email") or "").strip()
        name = (address.get("name") or "").strip()
        if not email_address and not name:
            continue
        formatted.append(formataddr((name, email_address)) if name else email_address)
    return ", ".join(formatted)


def format_email_header(email: dict[str, Any], *, full_headers: bool = False) -> str:
    lines: list[str] = []
    raw_headers = email.get("headers") or []

    if full_headers and raw_headers:
        for header in raw_headers:
            lines.append(f"{header.get('name', '')}: {(header.get('value') or '').strip()}")
    else:
        lines.append(f"ID: {email.get('id', '')}")
        lines.append(f"Subject: {email.get('subject') or ''}")
        for label, key in (("From", "from"), ("To", "to"), ("CC", "cc")):
            formatted = format_address_list(email.get(key))
            if formatted:
                lines.append(f"{label}: {formatted}")
        if email.get("receivedAt"):
            lines.append(f"Date: {email['receivedAt']}")

    return "\n".join(lines) + "\n\n"


def _first_body_value(email: dict[str, Any], parts_key: str) -> tuple[str, str] | None:
    body_values = email.get("bodyValues") or {}
    for part in email.get(parts_key) or []:
        value = body_values.get(part.get("partId"))
        if value is not None:
            return (part.get("type") or "").lower(), value.get("value") or ""
    return None


def item_from_email(email: dict[str, Any], *, full_headers: bool = False) -> Item:
    header = format_email_header(email, full_headers=full_headers)

    text_part = _first_body_value(email, "textBody")
    if text_part is not None:
        content_type, value = text_part
        if content_type == "text/html":
            return Item(header=header, html_body=value)
        return Item(header=header, plain_body=value)

    html_part = _first_body_value(email, "htmlBody")
    if html_part is not None:
        return Item(header=header, html_body=html_part[1])
    return Item(header=header)


def render_email_get(
    response: MethodResponse,
    settings: "Settings",
    *,
    max_chars: int | None = None,
    full_headers: bool = False,
    normalizer: BodyNormalizer | None = None,
) -> dict[str, Any]:
    if isinstance(response, MethodError):
        return {"status": "error", "error": str(response)}
    if not isinstance(response, EmailGetResponse):
        return {"status": "error", "error": f"unexpected response type: {type(response).__name__}"}

    if response.not_found:
        return {"status": "error", "error": f"emails not found: {response.not_found}"}
    if not response.emails:
        return {"status": "error", "error": "no emails found"}

    budget = positive_or_default(max_chars, settings.response_char_budget)
    normalizer = normalizer or BodyNormalizer.from_settings(settings)
    items = [item_from_email(email, full_headers=full_headers) for email in response.emails]
    result = allocate_response(items, budget, normalizer, marker=settings.truncation_marker)

    payload: dict[str, Any] = {"status": "ok", **result.as_dict()}
    if result.omitted:
        payload["hint"] = "reduce batch size"

    logger.info(
        "Rendered Email/get response",
        extra={
            "event": "email_get_rendered",
            "account_id": response.account_id,
            "included": result.included,
            "omitted": result.omitted,
            "budget": budget,
            "chars": len(result.text),
        },
    )
    return payload
