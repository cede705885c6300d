# =============================================================================
# main.py  -  Entry Point for the Sisense MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py            (or: sisense-mcp-server)
#
# WHAT HAPPENS:
#   1. Loads .env and validates the environment (core/config.py)
#   2. Configures logging on stderr (stdout belongs to the MCP protocol)
#   3. Builds the Sisense client, the Dispatcher and the FastMCP server
#   4. Serves MCP over stdio until the agent disconnects or Ctrl-C
#
# A bad environment or an invalid SISENSE_URL/SISENSE_API_KEY pair stops the
# process with exit status 1.  A MISSING url or key does not: the server
# still starts, lists its tools, and answers every call with
# CONFIGURATION_ERROR.
# =============================================================================

import logging
import sys

from dotenv import load_dotenv

from core.config import Settings
from core.dispatcher import Dispatcher
from core.errors import SisenseError
from core.sisense import SisenseClient
from tools.mcp_server import configure_logging, create_server

logger = logging.getLogger("sisense_mcp")


def main() -> None:
    """Bootstrap and run the server."""
    load_dotenv()

    try:
        settings = Settings.from_env()
    except SisenseError as exc:
        configure_logging()
        logger.error(f"❌ {exc.message}:")
        for problem in exc.context.get("errors", []):
            logger.error(f"  - {problem['variable']}: {problem['message']}")
        sys.exit(1)

    configure_logging(settings.logging_level)
    logger.info(
        f"Initializing {settings.server_name} v{settings.server_version} "
        f"(environment={settings.environment}, debug={settings.is_debug_enabled()})"
    )

    try:
        client = SisenseClient(settings.sisense_config(), logger=logging.getLogger("sisense_mcp.client"))
    except SisenseError as exc:
        logger.error(f"Failed to start: {exc.code}: {exc.message} {exc.context}")
        sys.exit(1)

    dispatcher = Dispatcher(client, logger=logging.getLogger("sisense_mcp.dispatcher"))
    mcp = create_server(dispatcher, settings)

    logger.info(f"{settings.server_name} started, serving MCP over stdio")
    try:
        mcp.run()
    except KeyboardInterrupt:
        pass
    logger.info(f"{settings.server_name} stopped")


if __name__ == "__main__":
    main()
