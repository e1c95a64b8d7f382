"""
MCP server exposing gitlab_get_mr_comments over stdio.

Agents connect via MCP (Model Context Protocol) and receive merge request review comments
(inline discussions and overview notes) as structured JSON or a Markdown digest.
The server is strictly read-only against GitLab.

Add to an MCP client config, e.g.:
    {
      "mcpServers": {
        "gitlab-mr-comments": {
          "command": "gitlab-mr-comments-server",
          "env": {"GITLAB_TOKEN": "glpat-...", "GITLAB_BASE_URL": "https://gitlab.com"}
        }
      }
    }
"""

import logging
import sys
from typing import Union

from mcp.server.fastmcp import FastMCP

from aggregator import run_tool
from config import Config, ConfigError, load_config
from logging_config import configure_logging

logger = logging.getLogger(__name__)

SERVER_NAME = "gitlab-mr-comments"
TOOL_NAME = "gitlab_get_mr_comments"
TOOL_DESCRIPTION = (
    "Fetch comments from a GitLab merge request. "
    "Returns inline discussions and overview notes in a structured format. "
    "Supports filtering by resolution status and excluding system notes. "
    "Useful for AI agents to review feedback and plan code fixes."
)


def create_server(config: Config) -> FastMCP:
    """Build the MCP server with the comments tool bound to the given configuration."""
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
    def gitlab_get_mr_comments(
        project: str,
        mr: Union[int, str],
        includeSystem: bool = False,
        includeOverviewNotes: bool = True,
        onlyResolved: bool = False,
        onlyUnresolved: bool = False,
        perPage: int = 100,
        format: str = "structured",
    ) -> str:
        """
        Args:
            project: Project path ('group/project') or numeric project id.
            mr: Merge request IID (the !123 number), integer or numeric string.
            includeSystem: Include system notes such as 'added 3 commits'.
            includeOverviewNotes: Also fetch non-threaded overview notes.
            onlyResolved: Only resolvable comments that are resolved.
            onlyUnresolved: Only resolvable comments that are unresolved. Exclusive with onlyResolved.
            perPage: Page size for GitLab pagination (1-100).
            format: 'structured' for JSON, 'digest' for a Markdown summary.
        """
        arguments = {
            "project": project,
            "mr": mr,
            "includeSystem": includeSystem,
            "includeOverviewNotes": includeOverviewNotes,
            "onlyResolved": onlyResolved,
            "onlyUnresolved": onlyUnresolved,
            "perPage": perPage,
            "format": format,
        }
        return run_tool(arguments, config)

    logger.info("Registered tool %s", TOOL_NAME)
    return mcp


def main():
    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Failed to start server: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)
    logger.info("Starting GitLab MR comments MCP server against %s", config.gitlab_base_url)
    create_server(config).run()


if __name__ == "__main__":
    main()
