TRUNCATION_MARKER = "\n\n[... body truncated ...]"


def truncate_body(text: str, limit: int, *, marker: str = TRUNCATION_MARKER) -> str:
    """Cut ``text`` to fit ``limit`` characters at a line boundary.

    The marker's length is reserved before the cut point is chosen. When the
    limit cannot even hold the marker, the marker alone is returned.
    """
    if len(text) <= limit:
        return text

    budget = limit - len(marker)
    if budget <= 0:
        return marker

    cut = text.rfind("\n", 0, budget)
    if cut <= 0:
        cut = budget
    return text[:cut] + marker
