"""UUID utility functions for QuestFocus.

Provides short UUID display and resolution of short ids typed on the
command line.
"""

from __future__ import annotations

from collections.abc import Iterable

from questfocus.exceptions import NotFoundError, ValidationError


def shorten_uuid(uuid: str, length: int = 8) -> str:
    """Get shortened version of UUID.

    Args:
        uuid: Full UUID string
        length: Number of characters to return (default 8)

    Returns:
        First N characters of UUID
    """
    return uuid[:length]


def resolve_uuid(
    short_or_full_id: str, candidates: Iterable[str], kind: str = "Item", min_length: int = 4
) -> str:
    """Resolve a short or full id against the known ids.

    Args:
        short_or_full_id: Either a full id or a unique prefix
        candidates: Ids to match against
        kind: Noun used in error messages
        min_length: Minimum length for prefixes

    Returns:
        The matching full id

    Raises:
        NotFoundError: No id matches
        ValidationError: Prefix is too short or ambiguous
    """
    short_or_full_id = short_or_full_id.lower().strip()
    candidates = list(candidates)

    if short_or_full_id in candidates:
        return short_or_full_id

    if len(short_or_full_id) < min_length:
        raise ValidationError(
            f"ID must be at least {min_length} characters. "
            f"Got: {short_or_full_id} ({len(short_or_full_id)} chars)"
        )

    matches = [c for c in candidates if c.startswith(short_or_full_id)]
    if not matches:
        raise NotFoundError(f"{kind} not found: {short_or_full_id}")

    if len(matches) > 1:
        shown = ", ".join(shorten_uuid(m) for m in matches[:5])
        if len(matches) > 5:
            shown += f", ... ({len(matches)} total)"
        raise ValidationError(
            f"Ambiguous ID '{short_or_full_id}' matches {len(matches)} {kind.lower()}s: {shown}"
        )

    return matches[0]
