import contextlib
import logging
from collections.abc import AsyncIterator

from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route
from starlette.types import Receive, Scope, Send

from ..config import Settings, configure_logging
from .catalog import tool_from_config
from .core import DynamicMCPServer, build_server


async def add_endpoint_handler(request: Request) -> JSONResponse:
    """HTTP endpoint to register a new tool at runtime

    Args:
        request: Starlette request containing the tool configuration JSON

    Returns:
        JSON response indicating success or failure
    """
    endpoint_manager = request.app.state.endpoint_manager
    try:
        body = await request.json()
        tool = tool_from_config(body)
        endpoint_manager.add_tool(tool)
    except ValueError as e:
        logging.error(f"[DynamicHTTP] Error adding endpoint: {e}")
        return JSONResponse({
            "success": False,
            "message": f"Error adding endpoint: {str(e)}"
        }, status_code=400)

    logging.info(f"[DynamicHTTP] Successfully added endpoint '{tool.name}'")
    return JSONResponse({
        "success": True,
        "message": f"Successfully added endpoint '{tool.name}'",
        "endpoint": {
            "name": tool.name,
            "path": tool.endpoint.path_template,
            "method": tool.endpoint.method.value
        }
    })


async def remove_endpoint_handler(request: Request) -> JSONResponse:
    """HTTP endpoint to remove a tool

    Args:
        request: Starlette request with the tool name in path parameters

    Returns:
        JSON response indicating success or failure
    """
    endpoint_name = request.path_params.get("name")
    if not endpoint_name:
        logging.warning("[DynamicHTTP] Remove endpoint called without name")
        return JSONResponse({
            "success": False,
            "message": "Endpoint name is required"
        }, status_code=400)

    if request.app.state.endpoint_manager.remove_tool(endpoint_name):
        logging.info(f"[DynamicHTTP] Successfully removed endpoint '{endpoint_name}'")
        return JSONResponse({
            "success": True,
            "message": f"Successfully removed endpoint '{endpoint_name}'"
        })
    return JSONResponse({
        "success": False,
        "message": f"Endpoint '{endpoint_name}' not found"
    }, status_code=404)


async def list_endpoints_handler(request: Request) -> JSONResponse:
    """HTTP endpoint to list all configured tools"""
    endpoints = request.app.state.endpoint_manager.list_tools()
    return JSONResponse({
        "success": True,
        "endpoints": endpoints,
        "count": len(endpoints)
    })


async def health_handler(request: Request) -> JSONResponse:
    """Health check endpoint"""
    endpoint_manager = request.app.state.endpoint_manager
    return JSONResponse({
        "status": "healthy",
        "server": request.app.state.server_name,
        "upstream": endpoint_manager.router.base_url,
        "tools_count": len(endpoint_manager.tools)
    })


def create_app(dynamic_server: DynamicMCPServer, host: str = "0.0.0.0", port: int = 8080) -> Starlette:
    """Build the Starlette application serving MCP and the admin API

    Args:
        dynamic_server: Configured DynamicMCPServer
        host: Advertised bind host, for log messages
        port: Advertised bind port, for log messages

    Returns:
        Starlette application
    """
    endpoint_manager = dynamic_server.get_endpoint_manager()
    session_manager = StreamableHTTPSessionManager(
        app=dynamic_server.get_server(),
        event_store=None,
        json_response=True,
        stateless=True,
    )

    async def handle_streamable_http(scope: Scope, receive: Receive, send: Send) -> None:
        """Handle MCP protocol requests via streamable HTTP"""
        await session_manager.handle_request(scope, receive, send)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        """Run the MCP session manager for the lifetime of the app"""
        async with session_manager.run():
            logging.info(
                f"[DynamicHTTP] {dynamic_server.server_name} serving {len(endpoint_manager.tools)} tools "
                f"for {endpoint_manager.router.base_url} on {host}:{port}"
            )
            if not endpoint_manager.tools:
                logging.warning("[DynamicHTTP] Catalog is empty; tools can be added via POST /api/endpoints")

            try:
                yield
            finally:
                logging.info("[DynamicHTTP] Server shutting down...")

    app = Starlette(
        routes=[
            Route("/api/endpoints", add_endpoint_handler, methods=["POST"]),
            Route("/api/endpoints/{name}", remove_endpoint_handler, methods=["DELETE"]),
            Route("/api/endpoints", list_endpoints_handler, methods=["GET"]),
            Route("/health", health_handler, methods=["GET"]),
            Mount("/", app=handle_streamable_http),
        ],
        lifespan=lifespan,
    )
    app.state.endpoint_manager = endpoint_manager
    app.state.server_name = dynamic_server.server_name
    return app


def main() -> None:
    """Main function to start the streamable HTTP server"""
    settings = Settings.from_env()
    configure_logging(settings)

    dynamic_server = build_server(settings)
    app = create_app(dynamic_server, settings.host, settings.port)

    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

__all__ = [
    "add_endpoint_handler",
    "remove_endpoint_handler",
    "list_endpoints_handler",
    "health_handler",
    "create_app",
    "main"
]
