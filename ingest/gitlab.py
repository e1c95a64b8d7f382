"""
Read-only GitLab REST API v4 client.
Only GET is implemented; there is deliberately no way to issue a mutating request through this client.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from errors import RequestTimeoutError, UnclassifiedError, error_from_response

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v4"
DEFAULT_TIMEOUT = 20.0


class PaginationInfo:
    """Pagination metadata parsed from GitLab's X-* response headers."""

    def __init__(self, next_page: Optional[int], total_pages: Optional[int], per_page: int, total: Optional[int]):
        self.next_page = next_page
        self.total_pages = total_pages
        self.per_page = per_page
        self.total = total

    def __repr__(self):
        return f"PaginationInfo(next_page={self.next_page}, total_pages={self.total_pages}, per_page={self.per_page}, total={self.total})"


def _int_header(headers, key: str) -> Optional[int]:
    val = headers.get(key)
    if val is None or str(val).strip() == "":
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def parse_pagination_headers(headers) -> PaginationInfo:
    """An empty or missing X-Next-Page means the current page is the last one."""
    headers = headers or {}
    per_page = _int_header(headers, "X-Per-Page")
    return PaginationInfo(
        next_page=_int_header(headers, "X-Next-Page"),
        total_pages=_int_header(headers, "X-Total-Pages"),
        per_page=per_page if per_page is not None else 100,
        total=_int_header(headers, "X-Total"),
    )


def merge_request_path(project: str, mr: int, resource: str) -> str:
    """Path of a collection scoped to one MR; the project path is URL-encoded ('group/project' -> 'group%2Fproject')."""
    return f"/projects/{quote(project, safe='')}/merge_requests/{mr}/{resource}"


class GitLabClient:
    """
    Client for the GitLab REST API.

    Parameters:
        base_url (str): GitLab instance URL, e.g. https://gitlab.com.
        token (str): Personal access token, sent as a Bearer credential.
        timeout (float): Per-request wall-clock timeout in seconds.
    """

    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    def build_url(self, path: str) -> str:
        api_path = path if path.startswith(API_PREFIX) else f"{API_PREFIX}{path}"
        return f"{self.base_url}{api_path}"

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, correlation_id: Optional[str] = None) -> Tuple[Any, PaginationInfo]:
        """Perform one GET and return (json body, pagination). Non-2xx responses raise a classified GitLabError."""
        url = self.build_url(path)
        logger.debug("GitLab API request GET %s params=%s", url, params, extra={"correlation_id": correlation_id})
        try:
            resp = requests.get(url, headers=self.headers, params=params or {}, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise RequestTimeoutError(
                "Request timed out",
                remediation=f"Increase REQUEST_TIMEOUT (current: {int(self.timeout * 1000)}ms) or reduce request scope",
            ) from None
        except requests.exceptions.RequestException as exc:
            raise UnclassifiedError(f"Request to GitLab failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise error_from_response(resp)

        pagination = parse_pagination_headers(resp.headers)
        logger.debug("GitLab API response status=%s %s", resp.status_code, pagination, extra={"correlation_id": correlation_id})
        return resp.json(), pagination

    def get_all_pages(self, path: str, params: Optional[Dict[str, Any]] = None, correlation_id: Optional[str] = None) -> List[Any]:
        """
        Walk every page of a collection starting at page 1, following X-Next-Page.
        Pages are requested strictly in order and concatenated as received.
        A next page that does not advance past the current one ends the walk.
        """
        results: List[Any] = []
        page = 1
        while True:
            page_params = dict(params or {})
            page_params["page"] = page
            data, pagination = self.get(path, page_params, correlation_id)
            results.extend(data)
            if pagination.next_page is None:
                break
            if pagination.next_page <= page:
                logger.warning(
                    "Ignoring X-Next-Page %s that does not advance past page %s",
                    pagination.next_page,
                    page,
                    extra={"correlation_id": correlation_id},
                )
                break
            logger.debug(
                "Fetching next page %s of %s (current %s)",
                pagination.next_page,
                pagination.total_pages,
                page,
                extra={"correlation_id": correlation_id},
            )
            page = pagination.next_page
        return results


__all__ = ["GitLabClient", "PaginationInfo", "parse_pagination_headers", "merge_request_path"]
