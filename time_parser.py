"""Parse free-text reminder times ("in one hour", "2 days from now").

Parsing is delegated to dateparser. Relative expressions are resolved against
the reference time passed by the caller, so the same text and reference always
give the same result.
"""

from datetime import datetime
from typing import Optional

import dateparser

from time_utils import ensure_utc, truncate_to_ms

PARSER_LANGUAGES = ["en"]


def parse_reminder_time(text: str, reference_now: datetime) -> Optional[datetime]:
    """Resolve a natural-language time expression to an absolute UTC datetime.

    Args:
        text: User input, e.g. "in one hour", "tomorrow 9am", "2026-11-01 10:00"
        reference_now: The moment of invocation; relative expressions are
            resolved against it

    Returns:
        Aware UTC datetime with millisecond precision, or None when no
        datetime expression is recognized
    """
    if not text or not text.strip():
        return None

    # dateparser localizes a naive base with TIMEZONE, so hand it naive UTC
    base = ensure_utc(reference_now).replace(tzinfo=None)
    parsed = dateparser.parse(
        text.strip(),
        languages=PARSER_LANGUAGES,
        settings={
            'RELATIVE_BASE': base,
            'TIMEZONE': 'UTC',
            'TO_TIMEZONE': 'UTC',
            'RETURN_AS_TIMEZONE_AWARE': True,
            # "9am" at noon means tomorrow, "March 3" in October means next year
            'PREFER_DATES_FROM': 'future',
        },
    )
    if parsed is None:
        return None

    return truncate_to_ms(ensure_utc(parsed))
