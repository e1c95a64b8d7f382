"""
Comment filters and chronological sort.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from normalize.models import Comment


@dataclass(frozen=True)
class FilterOptions:
    """
    only_resolved and only_unresolved are mutually exclusive; the combination is rejected
    when the request is validated (models.CommentsRequest), not here.
    """
    include_system: bool = False
    only_resolved: bool = False
    only_unresolved: bool = False


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp ('Z' suffix or offset) into an aware datetime; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _passes(comment: Comment, options: FilterOptions) -> bool:
    if not options.include_system and comment.system:
        return False
    # non-resolvable comments are excluded by either resolution filter
    if options.only_unresolved:
        return comment.resolvable and comment.resolved is False
    if options.only_resolved:
        return comment.resolvable and comment.resolved is True
    return True


def apply_filters(comments: List[Comment], options: FilterOptions) -> List[Comment]:
    """Return a new list of the comments passing every selected predicate, stably sorted by created_at."""
    kept = [c for c in comments if _passes(c, options)]
    return sorted(kept, key=lambda c: parse_timestamp(c.created_at))
