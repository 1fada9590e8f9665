# =============================================================================
# main.py  —  Entry Point for the 115 Driver MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py --cookie "UID=xxx;CID=xxx;SEID=xxx"
#   (or put PAN115_COOKIE=... in a .env file and run without --cookie)
#
# WHAT HAPPENS:
#   1. Loads .env (PAN115_COOKIE, PAN115_USER_AGENT, PAN115_TIMEOUT)
#   2. Builds the 115 client from the cookie
#   3. Checks the cookie is logged in (exits with an error if not)
#   4. Serves the MCP tools in tools/mcp_server.py over stdio
# =============================================================================

import logging
from typing import Optional

import typer
from dotenv import load_dotenv

# Must run before core.config reads the environment.
load_dotenv()

from core.client import Pan115Client
from core.config import Settings
from core.errors import DriverError

logger = logging.getLogger("pan115")

app = typer.Typer(add_completion=False, help="115 Driver MCP Server - access 115 cloud storage via MCP.")


@app.command()
def serve(
    cookie: Optional[str] = typer.Option(
        None,
        "--cookie",
        envvar="PAN115_COOKIE",
        help='115 cookie, e.g. "UID=xxx;CID=xxx;SEID=xxx".',
    ),
) -> None:
    """Check the login, then run the MCP server on stdio."""
    # Importing the server configures stderr logging before anything is logged.
    from tools import mcp_server

    if not cookie:
        typer.echo("Error: cookie is required (--cookie or PAN115_COOKIE)", err=True)
        raise typer.Exit(code=1)

    try:
        client = Pan115Client(Settings.from_env(cookie=cookie))
    except DriverError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1)

    with client:
        try:
            client.cookie_check()
        except DriverError as exc:
            typer.echo(f"Authentication failed: {exc}", err=True)
            raise typer.Exit(code=1)

        mcp_server.configure(client)
        mcp_server.mcp.run()
    logger.info("Server stopped")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
