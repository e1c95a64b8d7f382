"""
Unified comment model shared by filtering, rendering and the tool output.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class CommentSource(str, Enum):
    DISCUSSION = "discussion"
    NOTE = "note"


@dataclass(frozen=True)
class Author:
    """
    Normalized GitLab user identity.
    """
    id: Optional[int]
    username: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'username': self.username, 'name': self.name}


@dataclass(frozen=True)
class Comment:
    """
    One review comment, from either a discussion thread or the overview notes.

    Standalone notes (source == NOTE) never carry thread_id, resolution fields, position or file_path.
    resolved is None when the comment is not part of a resolution workflow.
    """
    source: CommentSource
    thread_id: Optional[str]
    note_id: int
    author: Optional[Author]
    body: str
    created_at: str
    updated_at: Optional[str]
    system: bool
    resolvable: bool
    resolved: Optional[bool]
    resolved_by: Optional[Author]
    position: Optional[Dict[str, Any]]
    file_path: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source.value,
            'thread_id': self.thread_id,
            'note_id': self.note_id,
            'author': self.author.to_dict() if self.author else None,
            'body': self.body,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'system': self.system,
            'resolvable': self.resolvable,
            'resolved': self.resolved,
            'resolved_by': self.resolved_by.to_dict() if self.resolved_by else None,
            'position': dict(self.position) if self.position is not None else None,
            'file_path': self.file_path,
        }
