from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from mail_digest.config import get_settings
from mail_digest.handlers.email_get import render_email_get
from mail_digest.services.jmap_payloads import EmailGetResponse, MethodResponse, parse_method_response
from mail_digest.services.logging_config import configure_logging


def load_method_response(document: Any) -> MethodResponse:
    if isinstance(document, dict) and "methodResponses" in document:
        responses = document.get("methodResponses") or []
        if not responses:
            raise ValueError("empty methodResponses")
        return parse_method_response(responses[0])
    if isinstance(document, list) and document and isinstance(document[0], str):
        return parse_method_response(document)
    if isinstance(document, list):
        return EmailGetResponse(emails=document)
    raise ValueError("expected an Email/get method response, a JMAP response object or a list of emails")


def _run(path: Path, max_chars: int | None, full_headers: bool) -> tuple[int, dict[str, Any]]:
    settings = get_settings()
    configure_logging(settings.log_level)

    document = json.loads(path.read_text(encoding="utf-8"))
    payload = render_email_get(
        load_method_response(document),
        settings,
        max_chars=max_chars,
        full_headers=full_headers,
    )

    if payload["status"] != "ok":
        return 1, payload
    if payload["omitted"] > 0:
        return 2, payload
    return 0, payload


def main() -> int:
    parser = argparse.ArgumentParser(description="Render a saved JMAP Email/get response as bounded plain text.")
    parser.add_argument("path", type=Path, help="JSON file holding the Email/get response.")
    parser.add_argument("--max-chars", type=int, default=0, help="Optional total response budget in characters.")
    parser.add_argument("--full-headers", action="store_true", help="Render every raw header instead of a summary.")
    parser.add_argument("--json", action="store_true", help="Print the full JSON payload instead of the text.")
    args = parser.parse_args()

    max_chars = args.max_chars if args.max_chars and args.max_chars > 0 else None
    code, payload = _run(args.path, max_chars, args.full_headers)
    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True))
    elif payload["status"] == "ok":
        sys.stdout.write(payload["text"])
    else:
        print(payload["error"], file=sys.stderr)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
