"""HTTP boundary of the Real Browser MCP Server."""
import asyncio
import logging.config
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from rich.markup import escape

from real_browser_mcp.config import ServerSettings, get_config
from real_browser_mcp.constants import (
    HEALTH_ENDPOINT,
    HEALTH_MESSAGE,
    INTERNAL_SERVER_ERROR,
    MCP_ENDPOINT,
    SESSION_HEADER,
)
from real_browser_mcp.core.context import AppContext, build_context
from real_browser_mcp.core.dispatcher import jsonrpc_error
from real_browser_mcp.exceptions import SessionRequiredError, TransportError
from real_browser_mcp.utils import build_logging_config, configure_loggers, get_logger

logger = get_logger("real_browser_mcp.server")


def _transport_failure(error: TransportError) -> JSONResponse:
    if error.status_code >= 500:
        return JSONResponse({"error": INTERNAL_SERVER_ERROR}, status_code=500)
    return JSONResponse(
        jsonrpc_error(None, error.jsonrpc_code, error.message),
        status_code=error.status_code,
    )


def create_app(context: AppContext, install_signals: bool = False) -> FastAPI:
    """
    Create the FastAPI application serving the MCP endpoint and the health probe.

    The lifespan installs the context's lifecycle guard on the serving event
    loop and runs its cleanup when the server stops, so the browser is
    released however the process ends.

    Args:
        context: Wired application singletons
        install_signals: Let the guard own SIGINT/SIGTERM on the serving loop

    Returns:
        FastAPI application instance ready for uvicorn
    """
    transport = context.transport

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context.guard.install(asyncio.get_running_loop(), install_signals=install_signals)
        logger.info(f"Available tools: {len(context.dispatcher.tools)} tools loaded", emoji_key="tools")
        logger.info("Content priority mode: Enabled", emoji_key="content")
        try:
            yield
        finally:
            await context.guard.shutdown("server shutdown")
            context.guard.uninstall()

    app = FastAPI(title=context.config.server.name, version=context.config.server.version, lifespan=lifespan)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.config.server.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.post(MCP_ENDPOINT)
    async def handle_mcp(request: Request) -> Response:
        try:
            message = transport.decode(await request.body())
            result = await transport.handle_exchange(message, request.headers.get(SESSION_HEADER))
        except TransportError as e:
            logger.error(f"Error handling MCP request: {escape(e.message)}")
            return _transport_failure(e)
        except Exception as e:
            logger.error(f"Error handling MCP request: {escape(str(e))}", exc_info=True)
            return JSONResponse({"error": INTERNAL_SERVER_ERROR}, status_code=500)

        headers = {SESSION_HEADER: result.session_id}
        if result.payload is None:
            return Response(status_code=202, headers=headers)
        return JSONResponse(result.payload, headers=headers)

    @app.delete(MCP_ENDPOINT)
    async def terminate_session(request: Request) -> Response:
        session_id = request.headers.get(SESSION_HEADER)
        try:
            if not session_id:
                raise SessionRequiredError()
            transport.terminate_session(session_id)
        except TransportError as e:
            return _transport_failure(e)
        return Response(status_code=204)

    @app.get(MCP_ENDPOINT)
    async def open_stream() -> Response:
        # No server-initiated messages, so no SSE stream to offer
        return Response(status_code=405, headers={"Allow": "POST, DELETE"})

    @app.get(HEALTH_ENDPOINT)
    async def health() -> PlainTextResponse:
        return PlainTextResponse(HEALTH_MESSAGE)

    return app


def start_server(
    config: Optional[ServerSettings] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Start the server and block until it exits.

    Command-line values take precedence over the configuration.

    Args:
        config: Settings, defaults to the process-wide configuration
        host: Bind address override
        port: Port override
        log_level: Log level override (debug, info, warning, error, critical)
    """
    import uvicorn

    cfg = config or get_config()
    server_host = host or cfg.server.host
    server_port = port or cfg.server.port
    final_log_level = (log_level or cfg.server.log_level).upper()

    logging_config = build_logging_config(final_log_level, cfg.logging.file)
    logging.config.dictConfig(logging_config)
    configure_loggers(cfg.logging, log_level)

    context = build_context(cfg)
    app = create_app(context, install_signals=True)

    uvicorn_config = uvicorn.Config(
        app,
        host=server_host,
        port=server_port,
        log_config=logging_config,
        log_level=final_log_level.lower(),
    )
    server = uvicorn.Server(uvicorn_config)

    def request_exit() -> None:
        server.should_exit = True

    context.guard.register_exit_callback(request_exit)

    logger.info(f"HTTP server is running on http://localhost:{server_port}", emoji_key="start")
    logger.info(f"MCP endpoint: http://{server_host}:{server_port}{MCP_ENDPOINT}", emoji_key="server")
    server.run()
