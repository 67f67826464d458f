"""MCP server exposing the blkmarket.ar REST API as tools."""

__version__ = "0.1.0"
