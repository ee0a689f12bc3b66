from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class MethodError:
    type: str
    description: str = ""
    call_id: str = ""

    def __str__(self) -> str:
        if self.description:
            return f"{self.type}: {self.description}"
        return self.type


@dataclass(frozen=True)
class EmailGetResponse:
    emails: list[dict[str, Any]] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    account_id: str = ""
    call_id: str = ""


MethodResponse = Union[EmailGetResponse, MethodError]


def parse_method_response(triple: Any) -> MethodResponse:
    """Decode one ``[name, arguments, call_id]`` JMAP method response."""
    if not isinstance(triple, (list, tuple)) or len(triple) != 3:
        raise ValueError(f"malformed method response: {triple!r}")

    name, args, call_id = triple
    if not isinstance(args, dict):
        raise ValueError(f"malformed arguments for {name!r}: {args!r}")

    if name == "error":
        return MethodError(
            type=str(args.get("type") or "serverFail"),
            description=str(args.get("description") or ""),
            call_id=str(call_id or ""),
        )
    if name == "Email/get":
        return EmailGetResponse(
            emails=list(args.get("list") or []),
            not_found=[str(value) for value in args.get("notFound") or []],
            account_id=str(args.get("accountId") or ""),
            call_id=str(call_id or ""),
        )
    raise ValueError(f"unexpected response type: {name}")
