import asyncio
import logging

from mcp.server.stdio import stdio_server

from blkmarket_mcp.config import Settings, configure_logging
from blkmarket_mcp.dynamic import DynamicMCPServer, build_server


async def serve(dynamic_server: DynamicMCPServer) -> None:
    server = dynamic_server.get_server()
    async with stdio_server() as (read_stream, write_stream):
        logging.info(f"[MCP] {dynamic_server.server_name} serving {len(dynamic_server.endpoint_manager.tools)} tools over stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings)
    asyncio.run(serve(build_server(settings)))


if __name__ == "__main__":
    main()
