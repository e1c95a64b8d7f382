"""
Error taxonomy for GitLab API access and tool invocation.
Every failure carries a machine-readable code and, when known, a one-line remediation hint.
"""
from typing import Optional


class GitLabError(Exception):
    """
    Base error raised by the fetch pipeline.

    Parameters:
        message (str): Root cause, human readable.
        code (str): Machine-readable code (e.g. HTTP_404, ETIMEDOUT).
        status (int): HTTP status when the error came from a response; drives retry classification.
        remediation (str): Optional suggestion shown to the caller.
    """
    default_code = 'GITLAB_ERROR'

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None, remediation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status
        self.remediation = remediation


class ValidationError(GitLabError):
    default_code = 'VALIDATION_ERROR'


class AuthError(GitLabError):
    default_code = 'HTTP_401'


class NotFoundError(GitLabError):
    default_code = 'HTTP_404'


class RateLimitError(GitLabError):
    default_code = 'HTTP_429'


class ServerError(GitLabError):
    default_code = 'HTTP_500'


class RequestTimeoutError(GitLabError):
    default_code = 'ETIMEDOUT'


class UnclassifiedError(GitLabError):
    default_code = 'UNCLASSIFIED'


class ToolError(Exception):
    """
    Failure returned to the invoking agent: a single message plus the preserved error code.
    str(error) reads "[CODE] message" so the code survives transports that forward only the text.
    """

    def __init__(self, message: str, code: str):
        super().__init__(f"[{code}] {message}")
        self.message = message
        self.code = code


AUTH_HINT = "Verify GITLAB_TOKEN has 'read_api' scope and access to the project"
NOT_FOUND_HINT = "Check project path (e.g. 'group/project') and MR IID (the !123 number) are correct"
RATE_LIMIT_HINT = "Reduce request frequency or use filters such as onlyUnresolved to limit data"
SERVER_HINT = "GitLab API is unavailable; try again later (status: https://status.gitlab.com)"
TIMEOUT_HINT = "Increase REQUEST_TIMEOUT or narrow the request scope"


def error_from_status(status: int, message: Optional[str] = None) -> GitLabError:
    """Build the classified error for a non-success HTTP status."""
    text = message or f"GitLab API error: HTTP {status}"
    code = f"HTTP_{status}"
    if status in (401, 403):
        return AuthError(text, code, status, AUTH_HINT)
    if status == 404:
        return NotFoundError(text, code, status, NOT_FOUND_HINT)
    if status == 429:
        return RateLimitError(text, code, status, RATE_LIMIT_HINT)
    if status >= 500:
        return ServerError(text, code, status, SERVER_HINT)
    return UnclassifiedError(text, code, status)


def error_from_response(resp) -> GitLabError:
    """Classify a requests.Response, preferring GitLab's JSON 'message' (or 'error') field for the cause."""
    status = getattr(resp, 'status_code', 0)
    message = f"GitLab API error: {status} {getattr(resp, 'reason', '') or ''}".rstrip()
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get('message') or body.get('error')
        if detail:
            message = f"GitLab API error: {detail}"
    return error_from_status(status, message)


def to_tool_error(exc: BaseException) -> ToolError:
    """Map any exception to the agent-facing ToolError, keeping its code."""
    if isinstance(exc, ToolError):
        return exc
    if isinstance(exc, GitLabError):
        message = exc.message
        if exc.remediation:
            message = f"{message}\n\nSuggestion: {exc.remediation}"
        return ToolError(message, exc.code)
    return ToolError(f"An unexpected error occurred: {exc}", UnclassifiedError.default_code)


__all__ = [
    'GitLabError',
    'ValidationError',
    'AuthError',
    'NotFoundError',
    'RateLimitError',
    'ServerError',
    'RequestTimeoutError',
    'UnclassifiedError',
    'ToolError',
    'error_from_status',
    'error_from_response',
    'to_tool_error',
]
