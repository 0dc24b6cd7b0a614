"""Email address normalisation and validation helpers."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from dao_notifications.models.schemas import SanitizeResult


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: str | None) -> str | None:
    """Return the trimmed, lowercased address or None when blank."""

    if not value:
        return None
    trimmed = str(value).strip()
    if not trimmed:
        return None
    return trimmed.lower()


def is_valid_email(value: str | None) -> bool:
    normalized = normalize_email(value)
    return bool(normalized and EMAIL_PATTERN.match(normalized))


def sanitize_emails(
    emails: Iterable[str | None] | None,
    *,
    log_invalid: bool = True,
) -> SanitizeResult:
    """
    Split requested addresses into valid and invalid entries.

    Blank and missing entries are dropped. Valid addresses are lowercased and
    deduplicated in first-seen order; invalid ones are kept exactly as given,
    duplicates included.

    Args:
        emails: Raw address strings (may contain None or blanks)
        log_invalid: Emit a warning for each rejected entry

    Returns:
        SanitizeResult with ``valid`` and ``invalid`` lists
    """
    valid: list[str] = []
    invalid: list[str] = []
    seen: set[str] = set()

    for raw in emails or []:
        if raw is None:
            continue
        raw_text = str(raw)
        normalized = normalize_email(raw_text)
        if normalized is None:
            continue

        if not EMAIL_PATTERN.match(normalized):
            invalid.append(raw_text)
            if log_invalid:
                logger.warning("[MAIL-INVALID] token=%s", raw_text)
            continue

        if normalized in seen:
            continue
        seen.add(normalized)
        valid.append(normalized)

    return SanitizeResult(valid=valid, invalid=invalid)
