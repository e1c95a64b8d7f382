"""
Digest renderer: turn a filtered, sorted comment list into a Markdown summary grouped by thread.
Rendering goes through the Jinja2 template report/templates/digest.md.j2.
"""

import os
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from normalize.models import Comment
from selection.filters import parse_timestamp

TEMPLATE_NAME = 'digest.md.j2'
THREAD_ID_LENGTH = 8
UNKNOWN_AUTHOR = 'unknown'
UNKNOWN_RESOLVER = 'someone'
GENERAL_FILE = 'General'

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _environment() -> Environment:
    tmpl_dir = os.path.join(os.path.dirname(__file__), 'templates')
    # .md templates are not autoescaped: comment bodies must pass through verbatim
    return Environment(
        loader=FileSystemLoader(tmpl_dir),
        autoescape=select_autoescape(['html', 'xml']),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def format_timestamp(value: Any) -> str:
    """Format an ISO string or datetime as 'YYYY-MM-DD HH:MM:SS UTC'."""
    dt = value if isinstance(value, datetime) else parse_timestamp(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')


def format_resolution_status(comment: Comment) -> str:
    """Empty for non-resolvable comments."""
    if not comment.resolvable:
        return ''
    if comment.resolved:
        resolver = comment.resolved_by.username if comment.resolved_by and comment.resolved_by.username else UNKNOWN_RESOLVER
        return f"✅ Resolved by @{resolver}"
    return "⚠️ Unresolved"


def group_by_thread(comments: List[Comment]) -> Tuple[List[Tuple[str, List[Comment]]], List[Comment]]:
    """Split comments into (threads in first-appearance order, standalone notes)."""
    threads: Dict[str, List[Comment]] = {}
    standalone: List[Comment] = []
    for c in comments:
        if c.thread_id is None:
            standalone.append(c)
        else:
            threads.setdefault(c.thread_id, []).append(c)
    return list(threads.items()), standalone


def _comment_context(c: Comment) -> Dict[str, Any]:
    return {
        'author': c.author.username if c.author and c.author.username else UNKNOWN_AUTHOR,
        'system': c.system,
        'timestamp': format_timestamp(c.created_at),
        'body': c.body,
    }


def _thread_context(thread_id: str, thread_comments: List[Comment]) -> Dict[str, Any]:
    first = thread_comments[0]
    return {
        'short_id': thread_id[:THREAD_ID_LENGTH],
        'file_path': first.file_path or GENERAL_FILE,
        'status': format_resolution_status(first),
        'comments': [_comment_context(c) for c in thread_comments],
    }


def render_digest(comments: List[Comment], project: str, mr: int, clock: Optional[Clock] = None) -> str:
    """
    Render the digest. clock supplies the 'Fetched' header time and is the only non-deterministic input.
    """
    threads, standalone = group_by_thread(comments)
    tmpl = _environment().get_template(TEMPLATE_NAME)
    return tmpl.render(
        project=project,
        mr=mr,
        generated_at=format_timestamp((clock or _utc_now)()),
        total=len(comments),
        threads=[_thread_context(tid, tc) for tid, tc in threads],
        notes=[_comment_context(c) for c in standalone],
    )


__all__ = ['render_digest', 'format_timestamp', 'format_resolution_status', 'group_by_thread']
