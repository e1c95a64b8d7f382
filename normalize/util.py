"""
Normalization helpers.
Map GitLab discussion notes and overview notes into normalize.models.Comment.
"""
from typing import Any, Dict, List, Optional
from normalize.models import Author, Comment, CommentSource


def normalize_author(raw: Optional[Dict[str, Any]]) -> Optional[Author]:
    """Create an Author from a GitLab user dict. Missing users (e.g. deleted accounts) map to None."""
    if not raw:
        return None
    return Author(id=raw.get('id'), username=raw.get('username') or '', name=raw.get('name') or '')


def extract_file_path(position: Optional[Dict[str, Any]]) -> Optional[str]:
    """Prefer new_path over old_path so renamed files show their post-change location."""
    if not position:
        return None
    return position.get('new_path') or position.get('old_path') or None


def normalize_discussion_note(raw: Dict[str, Any], thread_id: str) -> Comment:
    position = raw.get('position')
    resolved = raw.get('resolved')
    return Comment(
        source=CommentSource.DISCUSSION,
        thread_id=thread_id,
        note_id=raw.get('id'),
        author=normalize_author(raw.get('author')),
        body=raw.get('body') or '',
        created_at=raw.get('created_at'),
        updated_at=raw.get('updated_at') or None,
        system=bool(raw.get('system', False)),
        resolvable=bool(raw.get('resolvable', False)),
        resolved=resolved,
        resolved_by=normalize_author(raw.get('resolved_by')) if resolved is True else None,
        position=dict(position) if position else None,
        file_path=extract_file_path(position),
    )


def normalize_note(raw: Dict[str, Any]) -> Comment:
    """Standalone notes are never resolvable and carry no thread or position, whatever the payload says."""
    return Comment(
        source=CommentSource.NOTE,
        thread_id=None,
        note_id=raw.get('id'),
        author=normalize_author(raw.get('author')),
        body=raw.get('body') or '',
        created_at=raw.get('created_at'),
        updated_at=raw.get('updated_at') or None,
        system=bool(raw.get('system', False)),
        resolvable=False,
        resolved=None,
        resolved_by=None,
        position=None,
        file_path=None,
    )


def normalize_comments(discussions: List[Dict[str, Any]], notes: List[Dict[str, Any]]) -> List[Comment]:
    """
    Flatten discussions then standalone notes into one Comment list.
    Every input note yields exactly one Comment; thread order and note order are preserved.
    """
    comments: List[Comment] = []
    for discussion in discussions:
        thread_id = discussion.get('id')
        for raw in discussion.get('notes') or []:
            comments.append(normalize_discussion_note(raw, thread_id))
    for raw in notes:
        comments.append(normalize_note(raw))
    return comments
