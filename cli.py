"""
CLI entry point for gitlab-mr-comments. Wires the pipeline: fetch -> normalize -> filter -> report
"""

import argparse
import logging
import os
import sys

from aggregator import get_mr_comments, new_correlation_id
from config import ConfigError, load_config
from errors import GitLabError, to_tool_error
from ingest.gitlab import GitLabClient
from logging_config import configure_logging
from models import FORMAT_DIGEST, FORMAT_STRUCTURED, CommentsRequest

logger = logging.getLogger(__name__)


def _resolve_config(args, parser):
    """Load configuration from the environment, letting CLI flags take precedence.
    Calls parser.error() if the token is missing or the environment is invalid.
    """
    env = dict(os.environ)
    if args.token:
        env['GITLAB_TOKEN'] = args.token
    if args.gitlab_url:
        env['GITLAB_BASE_URL'] = args.gitlab_url
    if args.log_level:
        env['LOG_LEVEL'] = args.log_level
    try:
        config = load_config(env)
    except ConfigError as exc:
        parser.error(str(exc))
    return config.with_overrides(
        request_timeout=(args.timeout / 1000.0) if args.timeout is not None else None,
        max_retries=args.max_retries,
    )


def _build_request(args) -> CommentsRequest:
    return CommentsRequest.from_arguments({
        "project": args.project,
        "mr": args.mr,
        "includeSystem": args.include_system,
        "includeOverviewNotes": not args.no_overview_notes,
        "onlyResolved": args.only_resolved,
        "onlyUnresolved": args.only_unresolved,
        "perPage": args.per_page,
        "format": args.format,
    })


def write_output(content: str, out_file: str = ""):
    """Write output to a file when requested, otherwise to stdout."""
    if not out_file:
        print(content)
        return
    out_dir = os.path.dirname(out_file)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_file, "w", encoding="utf-8") as f:
        f.write(content)
    print(f"Wrote comments to {out_file}", file=sys.stderr)


def check_connection(config) -> int:
    """Fetch the authenticated user to verify the URL and token. Returns a process exit code."""
    client = GitLabClient(config.gitlab_base_url, config.gitlab_token, timeout=config.request_timeout)
    try:
        user, _ = client.get("/user")
    except GitLabError as exc:
        print(f"Connection check failed: {to_tool_error(exc).message}", file=sys.stderr)
        return 1
    print(f"Connected to {config.gitlab_base_url} as {user.get('name')} (@{user.get('username')})")
    return 0


def run(args, config) -> int:
    """Execute the pipeline and write the payload. Returns a process exit code."""
    try:
        request = _build_request(args)
        result = get_mr_comments(request, config, correlation_id=new_correlation_id())
    except Exception as exc:
        err = to_tool_error(exc)
        print(f"Error [{err.code}]: {err.message}", file=sys.stderr)
        return 2 if err.code == "VALIDATION_ERROR" else 1
    write_output(result.payload(request.format), args.out_file)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch GitLab merge request review comments (read-only)")
    parser.add_argument("--project", type=str, help="Project path (group/project) or numeric id")
    parser.add_argument("--mr", type=str, help="Merge request IID (the !123 number)")
    parser.add_argument("--include-system", action="store_true", help="Include system notes (e.g. 'added 3 commits')")
    parser.add_argument("--no-overview-notes", action="store_true", help="Skip non-threaded overview notes")
    parser.add_argument("--only-resolved", action="store_true", help="Only resolved resolvable comments")
    parser.add_argument("--only-unresolved", action="store_true", help="Only unresolved resolvable comments")
    parser.add_argument("--per-page", type=int, default=100, help="Page size for GitLab pagination (1-100)")
    parser.add_argument("--format", type=str, choices=(FORMAT_STRUCTURED, FORMAT_DIGEST), default=FORMAT_STRUCTURED, help="Output format")
    parser.add_argument("--out-file", type=str, default="", help="Write output to this path instead of stdout")
    # connection knobs: CLI flags override GITLAB_TOKEN, GITLAB_BASE_URL, REQUEST_TIMEOUT, MAX_RETRIES and LOG_LEVEL env
    parser.add_argument("--gitlab-url", type=str, default=None, help="GitLab base URL (overrides GITLAB_BASE_URL env)")
    parser.add_argument("--token", type=str, default=None, help="GitLab access token (overrides GITLAB_TOKEN env)")
    parser.add_argument("--timeout", type=int, default=None, help="Request timeout in milliseconds (overrides REQUEST_TIMEOUT env)")
    parser.add_argument("--max-retries", type=int, default=None, help="Maximum attempts for 429/5xx responses (overrides MAX_RETRIES env)")
    parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING or ERROR (overrides LOG_LEVEL env)")
    parser.add_argument("--check", action="store_true", help="Only verify the GitLab URL and token, then exit")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_retries is not None and args.max_retries < 1:
        parser.error("--max-retries must be at least 1")

    config = _resolve_config(args, parser)
    configure_logging(config.log_level)

    if args.check:
        return check_connection(config)
    if not args.project or not args.mr:
        parser.error("--project and --mr are required unless --check is given")
    return run(args, config)


if __name__ == "__main__":
    sys.exit(main())
