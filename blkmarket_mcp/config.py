"""Runtime settings for the blkmarket MCP server.

Settings are read once from the environment (and an optional .env file) and
passed explicitly to the components that need them.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://blkmarket.ar"
DEFAULT_SERVER_NAME = "blkmarket-mcp"

LOG_FORMAT = "[%(levelname)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Immutable server configuration

    Args:
        base_url: Upstream API base URL. None means "use the catalog's base_url".
        catalog_path: Endpoint catalog file. None means the packaged catalog.
        server_name: MCP server name
        host: Bind address for the HTTP transport
        port: Bind port for the HTTP transport
        log_level: Root logging level name
    """
    base_url: Optional[str] = None
    catalog_path: Optional[Path] = None
    server_name: str = DEFAULT_SERVER_NAME
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables

        Args:
            environ: Mapping to read instead of os.environ (skips .env loading)

        Raises:
            ValueError: If PORT is not an integer
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        port = environ.get("PORT", "8080")
        try:
            port = int(port)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port!r}") from None

        catalog = environ.get("BLKMARKET_CATALOG")
        return cls(
            base_url=environ.get("BLKMARKET_BASE_URL") or None,
            catalog_path=Path(catalog) if catalog else None,
            server_name=environ.get("BLKMARKET_SERVER_NAME", DEFAULT_SERVER_NAME),
            host=environ.get("HOST", "0.0.0.0"),
            port=port,
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )

    def resolve_base_url(self, catalog_base_url: Optional[str]) -> str:
        return self.base_url or catalog_base_url or DEFAULT_BASE_URL


def configure_logging(settings: Settings) -> None:
    # stderr keeps stdout free for the stdio transport
    logging.basicConfig(stream=sys.stderr, level=settings.log_level, format=LOG_FORMAT)


__all__ = [
    "DEFAULT_BASE_URL",
    "Settings",
    "configure_logging",
]
