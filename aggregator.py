"""
Comment aggregation pipeline for one merge request:
fetch (discussions and overview notes in parallel) -> normalize -> filter/sort -> optional digest.
"""
import logging
import threading
import uuid
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from config import Config
from errors import to_tool_error
from ingest.merge_requests import fetch_all_discussions, fetch_all_notes
from models import FORMAT_DIGEST, CommentsRequest, CommentsResult
from normalize.util import normalize_comments
from report.renderer import render_digest
from selection import apply_filters

logger = logging.getLogger(__name__)


def new_correlation_id() -> str:
    return str(uuid.uuid4())


def _fetch_both(request: CommentsRequest, config: Config, correlation_id: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Run the discussion and note fetches on two workers and join them.
    The first failure aborts the call: the other branch's result is discarded and, if it is
    still retrying, it gives up at its next backoff instead of sleeping on.
    """
    cancel = threading.Event()
    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="mr-fetch")
    try:
        discussions_f = executor.submit(
            fetch_all_discussions, request.project, request.mr, request.per_page, config, correlation_id, cancel=cancel
        )
        notes_f = None
        if request.include_overview_notes:
            notes_f = executor.submit(
                fetch_all_notes, request.project, request.mr, request.per_page, config, correlation_id, cancel=cancel
            )
        futures = [f for f in (discussions_f, notes_f) if f is not None]

        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        for f in futures:
            if f in done and f.exception() is not None:
                raise f.exception()

        discussions = discussions_f.result()
        notes = notes_f.result() if notes_f is not None else []
        return discussions, notes
    finally:
        cancel.set()
        executor.shutdown(wait=False, cancel_futures=True)


def get_mr_comments(
    request: CommentsRequest,
    config: Config,
    correlation_id: Optional[str] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> CommentsResult:
    """
    Fetch, normalize, filter and optionally render the comments of one merge request.
    Either a complete CommentsResult is returned or the first error propagates unchanged.
    """
    correlation_id = correlation_id or new_correlation_id()
    now = clock or (lambda: datetime.now(timezone.utc))

    discussions, notes = _fetch_both(request, config, correlation_id)

    comments = normalize_comments(discussions, notes)
    filtered = apply_filters(comments, request.filter_options)

    digest = None
    if request.format == FORMAT_DIGEST:
        digest = render_digest(filtered, request.project, request.mr, clock=now)

    return CommentsResult(
        project=request.project,
        mr=request.mr,
        fetched_at=now().isoformat(),
        comments=filtered,
        discussion_count=len(discussions),
        note_count=len(notes),
        digest=digest,
    )


def run_tool(arguments: Optional[Mapping[str, Any]], config: Config) -> str:
    """
    Entry point for the tool invocation layer: validate arguments, run the pipeline, return the payload text.
    Failures are logged and re-raised as errors.ToolError carrying the original code and a remediation hint.
    """
    correlation_id = new_correlation_id()
    if config.log_payloads:
        logger.info("Tool invoked: gitlab_get_mr_comments arguments=%s", dict(arguments or {}), extra={"correlation_id": correlation_id})
    else:
        logger.info("Tool invoked: gitlab_get_mr_comments", extra={"correlation_id": correlation_id})
    try:
        request = CommentsRequest.from_arguments(arguments)
        result = get_mr_comments(request, config, correlation_id=correlation_id)
    except Exception as exc:
        tool_error = to_tool_error(exc)
        logger.error("Tool execution failed [%s]: %s", tool_error.code, exc, extra={"correlation_id": correlation_id})
        raise tool_error from exc

    logger.info("Tool completed: %s", result.counts, extra={"correlation_id": correlation_id})
    return result.payload(request.format)


__all__ = ["get_mr_comments", "run_tool", "new_correlation_id"]
