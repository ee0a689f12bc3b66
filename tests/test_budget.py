from mail_digest.services.budget import (
    ITEM_SEPARATOR,
    AllocationResult,
    Item,
    allocate_response,
    format_advisory,
)
from mail_digest.services.email_parser import NO_CONTENT_PLACEHOLDER, BodyNormalizer
from mail_digest.services.truncation import TRUNCATION_MARKER


class _IdentityStripper:
    def strip(self, text: str) -> str:
        return text


class _CountingNormalizer:
    def __init__(self) -> None:
        self.seen: list[str] = []

    def normalize(self, item: Item) -> str:
        self.seen.append(item.header)
        return item.plain_body or NO_CONTENT_PLACEHOLDER


def _normalizer(limit: int = 4000) -> BodyNormalizer:
    return BodyNormalizer(_IdentityStripper(), single_body_char_limit=limit)


def _header(n: int) -> str:
    return f"ID: m{n}\nSubject: Message {n}\n\n"


def test_allocate_empty_item_list() -> None:
    assert allocate_response([], 50000, _normalizer()) == AllocationResult("", 0, 0)


def test_allocate_all_items_fit_without_advisory() -> None:
    items = [Item(header=_header(n), plain_body=f"Body {n}") for n in range(3)]

    result = allocate_response(items, 50000, _normalizer())

    assert result.included == 3
    assert result.omitted == 0
    assert "TRUNCATED" not in result.text
    assert result.text == (
        _header(0) + "Body 0" + ITEM_SEPARATOR + _header(1) + "Body 1" + ITEM_SEPARATOR + _header(2) + "Body 2"
    )


def test_allocate_omits_suffix_once_budget_is_exhausted() -> None:
    subjects = [f"Subject: {n} " + "s" * 200 + "\n\n" for n in range(3)]
    items = [Item(header=subject, plain_body="x" * 20000) for subject in subjects]

    result = allocate_response(items, 30000, _normalizer(limit=25000))

    assert result.included == 2
    assert result.omitted == 1
    assert result.text.startswith(subjects[0] + "x" * 20000 + ITEM_SEPARATOR + subjects[1])
    assert subjects[2] not in result.text
    assert "--- TRUNCATED: 1 of 3 emails omitted (response would exceed 30000 chars)." in result.text
    assert len(result.text) <= 30000 + len(TRUNCATION_MARKER)


def test_allocate_single_oversized_item_is_truncated_to_budget() -> None:
    items = [Item(header="Subject: big\n\n", plain_body="line\n" * 2000)]

    result = allocate_response(items, 1000, _normalizer(limit=20000))

    assert result.included == 1
    assert result.omitted == 0
    assert result.text.endswith(TRUNCATION_MARKER)
    assert len(result.text) <= 1000


def test_allocate_single_item_that_fits_budget_is_kept_whole() -> None:
    header = "Subject: report\n\n"
    body = "\n".join(f"line {n}" for n in range(120))

    result = allocate_response([Item(header=header, plain_body=body)], len(header) + len(body) + 5, _normalizer(20000))

    assert result.text == header + body
    assert result.included == 1
    assert result.omitted == 0


def test_allocate_last_item_may_use_advisory_room() -> None:
    items = [
        Item(header=_header(0), plain_body="a" * 800),
        Item(header=_header(1), plain_body="b" * 50),
    ]

    result = allocate_response(items, 1000, _normalizer())

    assert result.text == _header(0) + "a" * 800 + ITEM_SEPARATOR + _header(1) + "b" * 50
    assert result.omitted == 0


def test_allocate_zero_budget_omits_everything() -> None:
    items = [Item(header=_header(n), plain_body="Body") for n in range(2)]

    result = allocate_response(items, 0, _normalizer())

    assert result.included == 0
    assert result.omitted == 2
    assert len(result.text) <= len(TRUNCATION_MARKER)


def test_allocate_item_without_body_renders_placeholder() -> None:
    result = allocate_response([Item(header=_header(1))], 50000, _normalizer())

    assert result.text == _header(1) + NO_CONTENT_PLACEHOLDER
    assert result.included == 1


def test_allocate_does_not_normalize_omitted_items() -> None:
    normalizer = _CountingNormalizer()
    items = [Item(header=_header(n), plain_body="y" * 500) for n in range(5)]

    result = allocate_response(items, len(format_advisory(5, 5, 700)) + 600, normalizer)

    assert result.included == 2
    assert result.omitted == 3
    assert normalizer.seen == [_header(0), _header(1)]


def test_allocate_preserves_input_order_and_counts() -> None:
    items = [Item(header=_header(n), plain_body=f"Body {n}\n" * (n + 1) * 20) for n in range(6)]
    advisory_room = len(format_advisory(6, 6, 0)) + 10

    for budget in range(0, 1500, 17):
        result = allocate_response(items, budget, _normalizer())

        assert result.included + result.omitted == len(items)
        assert len(result.text) <= budget + len(TRUNCATION_MARKER)

        positions = [result.text.find(_header(n)) for n in range(result.included)]
        assert all(position >= 0 for position in positions)
        assert positions == sorted(positions)
        for n in range(result.included, len(items)):
            assert _header(n) not in result.text
        if result.omitted and budget >= advisory_room:
            assert f"{result.omitted} of {len(items)} emails omitted" in result.text


def test_allocation_result_as_dict() -> None:
    result = AllocationResult("text", 2, 1)

    assert result.total == 3
    assert result.as_dict() == {"text": "text", "included": 2, "omitted": 1}
