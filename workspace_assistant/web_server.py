"""HTTP API for asking questions about a workspace."""

import json
import logging

from aiohttp import web
from pydantic import ValidationError

from workspace_assistant.query import ChatRequest, ErrorResponse, QueryProcessor

logger = logging.getLogger(__name__)

SERVICE_NAME = "Workspace Assistant"


class WebServer:
    """HTTP server exposing the chat endpoint and health checks."""

    def __init__(self, processor: QueryProcessor, port: int = 3000):
        """Initialize web server."""
        self.port = port
        self.processor = processor
        self.app = web.Application()
        self._setup_routes()
        logger.info(f"Web server initialized on port {port}")

    def _setup_routes(self):
        """Set up HTTP routes."""
        self.app.router.add_get("/", self._handle_health)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_post("/api/chat/message", self._handle_chat_message)
        logger.info("Routes configured: /, /health, /api/chat/message")

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        health = await self.processor.health_check()
        status = "healthy" if health["overall"] else "degraded"
        return web.json_response({"status": status, "service": SERVICE_NAME, "checks": health})

    async def _handle_chat_message(self, request: web.Request) -> web.Response:
        """
        Answer a question about a workspace.

        Expects JSON: {"message": "...", "workspace_id": "...", "user_id": "...",
        "channel_name": "...", "user": {"username": "...", "full_name": "..."}}
        """
        try:
            data = await request.json()
            chat_request = ChatRequest.model_validate(data)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.error(f"Invalid chat request: {e}")
            error = ErrorResponse(error="Failed to process request", details=str(e))
            return web.json_response(error.model_dump(exclude_none=True), status=500)

        logger.info(
            f"Received chat message for workspace {chat_request.workspace_id} "
            f"from user {chat_request.user_id}"
        )
        response = await self.processor.process_message(chat_request)

        if isinstance(response, ErrorResponse):
            return web.json_response(response.model_dump(exclude_none=True), status=500)
        return web.json_response(response.model_dump())

    async def start(self):
        """Start the web server."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, "0.0.0.0", self.port)
        await site.start()
        logger.info(f"Web server started on port {self.port}")
        logger.info(f"Chat endpoint: http://localhost:{self.port}/api/chat/message")
        return runner

    async def stop(self, runner):
        """Stop the web server."""
        await runner.cleanup()
        logger.info("Web server stopped")
