"""
Merge request collection fetchers: discussions (threaded) and notes (overview comments).
Each call builds its own client and wraps the full page walk in the retry policy.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

from config import Config
from ingest.gitlab import GitLabClient, merge_request_path
from ingest.retry import RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

BASE_DELAY = 1.0
MAX_DELAY = 10.0


def _client(config: Config) -> GitLabClient:
    return GitLabClient(config.gitlab_base_url, config.gitlab_token, timeout=config.request_timeout)


def _policy(config: Config) -> RetryPolicy:
    return RetryPolicy(max_attempts=config.max_retries, base_delay=BASE_DELAY, max_delay=MAX_DELAY)


def _fetch_collection(
    resource: str,
    project: str,
    mr: int,
    per_page: int,
    config: Config,
    correlation_id: Optional[str],
    cancel: Optional[threading.Event],
) -> List[Dict[str, Any]]:
    client = _client(config)
    path = merge_request_path(project, mr, resource)
    return retry_with_backoff(
        lambda: client.get_all_pages(path, {"per_page": per_page}, correlation_id),
        _policy(config),
        correlation_id=correlation_id,
        cancel=cancel,
    )


def fetch_all_discussions(project: str, mr: int, per_page: int, config: Config, correlation_id: Optional[str] = None, cancel: Optional[threading.Event] = None) -> List[Dict[str, Any]]:
    """Fetch every discussion of a merge request."""
    logger.info("Fetching discussions for %s!%s", project, mr, extra={"correlation_id": correlation_id})
    discussions = _fetch_collection("discussions", project, mr, per_page, config, correlation_id, cancel)
    logger.info(
        "Discussions fetched: %d threads, %d notes",
        len(discussions),
        sum(len(d.get("notes") or []) for d in discussions),
        extra={"correlation_id": correlation_id},
    )
    return discussions


def fetch_all_notes(project: str, mr: int, per_page: int, config: Config, correlation_id: Optional[str] = None, cancel: Optional[threading.Event] = None) -> List[Dict[str, Any]]:
    """Fetch every overview note of a merge request."""
    logger.info("Fetching overview notes for %s!%s", project, mr, extra={"correlation_id": correlation_id})
    notes = _fetch_collection("notes", project, mr, per_page, config, correlation_id, cancel)
    logger.info("Overview notes fetched: %d", len(notes), extra={"correlation_id": correlation_id})
    return notes


__all__ = ["fetch_all_discussions", "fetch_all_notes"]
