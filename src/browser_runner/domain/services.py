"""
Domain Services

Port-candidate selection and failure translation for automation runs.
"""

from typing import Iterable, List, Optional, Sequence, Tuple


MIN_PORT = 1
MAX_PORT = 65535

# Ordered (substring, hint) pairs, first match wins.
ERROR_SUGGESTIONS: Tuple[Tuple[str, str], ...] = (
    (
        "Target closed",
        "The browser or page was closed unexpectedly. Check if the page navigation completed.",
    ),
    (
        "Target page, context or browser has been closed",
        "The browser or page was closed unexpectedly. Check if the page navigation completed.",
    ),
    (
        "Timeout",
        "Operation timed out. Try increasing the timeout or check if the element exists.",
    ),
    (
        "timed out",
        "Operation timed out. Try increasing the timeout or check if the element exists.",
    ),
    (
        "Element is not visible",
        "The element exists but is hidden. Use force=True or wait for visibility.",
    ),
    (
        "Element is outside of the viewport",
        "Try scrolling to the element first with scroll_into_view_if_needed().",
    ),
    (
        "net::ERR_CONNECTION_REFUSED",
        "Could not connect to the URL. Make sure the server is running.",
    ),
    (
        "No module named",
        "Module not found. Run: pip install playwright",
    ),
    (
        "Executable doesn't exist",
        "Browser not installed. Run: python -m playwright install chromium",
    ),
)


def find_suggestion(
    message: str,
    suggestions: Sequence[Tuple[str, str]] = ERROR_SUGGESTIONS,
) -> Optional[str]:
    """Return the hint of the first pattern contained in message, or None."""
    for pattern, hint in suggestions:
        if pattern in message:
            return hint
    return None


def describe_failure(
    message: str,
    suggestions: Sequence[Tuple[str, str]] = ERROR_SUGGESTIONS,
) -> str:
    """
    Append an actionable suggestion to an automation error message.

    Args:
        message: Raw error message
        suggestions: Ordered (substring, hint) table

    Returns:
        The message unchanged when no pattern matches, otherwise the message
        followed by a blank line and ``Suggestion: <hint>``

    Examples:
        >>> describe_failure("boom")
        'boom'
        >>> describe_failure("Navigation timed out").endswith("check if the element exists.")
        True
    """
    hint = find_suggestion(message, suggestions)
    if hint is None:
        return message
    return f"{message}\n\nSuggestion: {hint}"


def build_candidate_ports(baseline: Iterable[int], extra: Optional[Iterable[int]] = None) -> List[int]:
    """
    Union of the baseline ports and caller extras, duplicates removed.

    Baseline order comes first, then extras in the order given, so the
    result is stable for a given input. Values that are not TCP ports
    (outside 1-65535, or not integers at all) are dropped.
    """
    ports: List[int] = []
    seen = set()
    for candidate in list(baseline) + list(extra or []):
        try:
            port = int(candidate)
        except (TypeError, ValueError):
            continue
        if not MIN_PORT <= port <= MAX_PORT or port in seen:
            continue
        seen.add(port)
        ports.append(port)
    return ports
