# =============================================================================
# core/config.py  -  Environment Settings
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the process environment (after main.py has run load_dotenv()) into
#   one frozen Settings object.  Nothing else in the project touches
#   os.environ.
#
# VARIABLES:
#   MCP_SERVER_NAME          server identity           (sisense-local-mcp-server)
#   MCP_SERVER_VERSION       reported version          (1.0.0)
#   MCP_SERVER_DESCRIPTION   instructions for agents   (Local (STD) Sisense MCP server)
#   LOG_LEVEL                error | warn | info | debug            (info)
#   SISENSE_URL              e.g. https://bi.example.com            (unset)
#   SISENSE_API_KEY          bearer token                           (unset)
#   APP_ENV / NODE_ENV       development | production | test        (development)
#   DEBUG                    true/false, forces debug logging       (false)
# =============================================================================

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from core.errors import ErrorKind, SisenseError
from core.models import SisenseConfig

LOG_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}
ENVIRONMENTS = ("development", "production", "test")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"", "0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Validated process configuration."""

    server_name: str = "sisense-local-mcp-server"
    server_version: str = "1.0.0"
    server_description: str = "Local (STD) Sisense MCP server"
    log_level: str = "info"
    sisense_url: str = ""
    sisense_api_key: str = field(default="", repr=False)
    environment: str = "development"
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build Settings from environment variables.

        Raises:
            SisenseError: CONFIGURATION, listing every invalid variable.
        """
        env = os.environ if environ is None else environ
        problems = []

        log_level = env.get("LOG_LEVEL", "info").strip().lower()
        if log_level not in LOG_LEVELS:
            problems.append({"variable": "LOG_LEVEL", "message": f"must be one of {list(LOG_LEVELS)}"})

        environment = (env.get("APP_ENV") or env.get("NODE_ENV") or "development").strip().lower()
        if environment not in ENVIRONMENTS:
            problems.append({"variable": "APP_ENV", "message": f"must be one of {list(ENVIRONMENTS)}"})

        raw_debug = env.get("DEBUG", "").strip().lower()
        if raw_debug not in _TRUE | _FALSE:
            problems.append({"variable": "DEBUG", "message": "must be a boolean"})

        if problems:
            raise SisenseError(ErrorKind.CONFIGURATION, "Environment validation failed", {"errors": problems})

        defaults = cls()
        return cls(
            server_name=env.get("MCP_SERVER_NAME") or defaults.server_name,
            server_version=env.get("MCP_SERVER_VERSION") or defaults.server_version,
            server_description=env.get("MCP_SERVER_DESCRIPTION") or defaults.server_description,
            log_level=log_level,
            sisense_url=env.get("SISENSE_URL", "").strip(),
            sisense_api_key=env.get("SISENSE_API_KEY", "").strip(),
            environment=environment,
            debug=raw_debug in _TRUE,
        )

    def is_debug_enabled(self) -> bool:
        return self.debug

    @property
    def logging_level(self) -> int:
        """The stdlib logging level; DEBUG=true wins over LOG_LEVEL."""
        return logging.DEBUG if self.debug else LOG_LEVELS[self.log_level]

    def sisense_config(self) -> SisenseConfig:
        return SisenseConfig(url=self.sisense_url, api_key=self.sisense_api_key)
