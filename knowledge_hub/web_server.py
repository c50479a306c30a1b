"""HTTP API for the knowledge hub pipeline."""

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from aiohttp import web

from knowledge_hub.errors import ErrorCode, ErrorDetail
from knowledge_hub.pipeline import KnowledgePipeline
from knowledge_hub.question import QuestionMetadata
from knowledge_hub.search import SearchOptions

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.EMPTY_QUESTION: 400,
    ErrorCode.TOO_SHORT: 400,
    ErrorCode.TOO_LONG: 400,
    ErrorCode.OFFENSIVE_CONTENT: 400,
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.CONNECTION_FAILED: 502,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.SEARCH_FAILED: 502,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.DOCUMENTATION_UNAVAILABLE: 503,
}


def _default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_payload(value: Any) -> Any:
    """Convert pipeline results to plain JSON-compatible data."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    return json.loads(json.dumps(value, default=_default))


def _error_response(detail: ErrorDetail, status: int | None = None) -> web.Response:
    return web.json_response(
        {"success": False, "error": to_payload(detail)},
        status=status or _STATUS_BY_CODE.get(detail.code, 500),
    )


def _session_not_found(session_id: str) -> web.Response:
    return _error_response(ErrorDetail.from_code(ErrorCode.SESSION_NOT_FOUND, f"Session {session_id} not found"))


class WebServer:
    """HTTP server exposing the question pipeline."""

    def __init__(self, pipeline: KnowledgePipeline, host: str = "0.0.0.0", port: int = 3000):
        """Initialize web server."""
        self.pipeline = pipeline
        self.host = host
        self.port = port
        self.app = web.Application()
        self._setup_routes()
        logger.info(f"Web server initialized on port {port}")

    def _setup_routes(self):
        """Set up HTTP routes."""
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_post("/api/questions", self._handle_question)
        self.app.router.add_post("/api/questions/validate", self._handle_validate)
        self.app.router.add_post("/api/questions/normalize", self._handle_normalize)
        self.app.router.add_post("/api/questions/analyze", self._handle_analyze)
        self.app.router.add_post("/api/sessions", self._handle_create_session)
        self.app.router.add_get("/api/sessions/{session_id}", self._handle_get_session)
        self.app.router.add_delete("/api/sessions/{session_id}", self._handle_delete_session)
        self.app.router.add_get("/api/sessions/{session_id}/history", self._handle_history)
        self.app.router.add_post("/api/search", self._handle_search)
        self.app.router.add_post("/api/search/related", self._handle_related)
        self.app.router.add_get("/api/search/cache", self._handle_cache_stats)
        self.app.router.add_delete("/api/search/cache", self._handle_clear_cache)
        self.app.router.add_post("/api/documentation/read", self._handle_read)
        logger.info(
            "Routes configured: /health, /api/questions, /api/sessions, /api/search, /api/documentation/read"
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        backend_healthy = await self.pipeline.search_service.client.health_check()
        return web.json_response(
            {
                "status": "healthy" if backend_healthy else "degraded",
                "service": "AWS Knowledge Hub",
                "documentation_backend": backend_healthy,
            }
        )

    async def _handle_question(self, request: web.Request) -> web.Response:
        """Answer a question.

        Expects JSON: {"question": "...", "session_id": "...", "metadata": {...}}
        """
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data

        metadata = QuestionMetadata(
            user_agent=request.headers.get("User-Agent"),
            origin=request.headers.get("Origin"),
            extra=data.get("metadata") or {},
        )
        result = await self.pipeline.process_question(
            str(data.get("question") or ""),
            session_id=data.get("session_id"),
            metadata=metadata,
        )

        status = 200
        if not result.success and result.error:
            status = _STATUS_BY_CODE.get(result.error.code, 500)
        return web.json_response(to_payload(result), status=status)

    async def _handle_validate(self, request: web.Request) -> web.Response:
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data
        return web.json_response(to_payload(self.pipeline.validate(str(data.get("question") or ""))))

    async def _handle_normalize(self, request: web.Request) -> web.Response:
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data
        return web.json_response(to_payload(self.pipeline.normalize(str(data.get("question") or ""))))

    async def _handle_analyze(self, request: web.Request) -> web.Response:
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data
        return web.json_response(to_payload(self.pipeline.analyze(str(data.get("question") or ""))))

    async def _handle_create_session(self, request: web.Request) -> web.Response:
        metadata = QuestionMetadata(
            user_agent=request.headers.get("User-Agent"),
            origin=request.headers.get("Origin"),
        )
        session_id = await self.pipeline.create_session(metadata)
        return web.json_response({"session_id": session_id}, status=201)

    async def _handle_get_session(self, request: web.Request) -> web.Response:
        session_id = request.match_info["session_id"]
        session = await self.pipeline.get_session(session_id)
        if session is None:
            return _session_not_found(session_id)
        return web.json_response(
            {
                "session_id": session.session_id,
                "created_at": session.created_at.isoformat(),
                "last_activity": session.last_activity.isoformat(),
                "expires_at": session.expires_at.isoformat(),
                "question_count": session.question_count,
                "metadata": to_payload(session.metadata),
            }
        )

    async def _handle_delete_session(self, request: web.Request) -> web.Response:
        session_id = request.match_info["session_id"]
        if not await self.pipeline.delete_session(session_id):
            return _session_not_found(session_id)
        return web.json_response({"session_id": session_id, "deleted": True})

    async def _handle_history(self, request: web.Request) -> web.Response:
        session_id = request.match_info["session_id"]
        try:
            limit = int(request.query["limit"]) if "limit" in request.query else None
        except ValueError:
            return web.json_response({"success": False, "error": "limit must be an integer"}, status=400)

        if await self.pipeline.get_session(session_id) is None:
            return _session_not_found(session_id)

        history = await self.pipeline.get_history(session_id, limit)
        return web.json_response({"session_id": session_id, "history": [to_payload(entry) for entry in history]})

    async def _handle_search(self, request: web.Request) -> web.Response:
        """Search documentation without generating an answer.

        Expects JSON: {"question": "...", "topics": [...], "max_results": 5, "use_cache": true}
        """
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data

        topics = data.get("topics")
        max_results = data.get("max_results")
        if topics is not None and not (isinstance(topics, list) and all(isinstance(t, str) for t in topics)):
            return web.json_response({"success": False, "error": "topics must be a list of strings"}, status=400)
        if max_results is not None and (not isinstance(max_results, int) or max_results < 1):
            return web.json_response({"success": False, "error": "max_results must be a positive integer"}, status=400)

        options = SearchOptions(
            max_results=max_results,
            use_cache=bool(data.get("use_cache", True)),
            topics=topics or None,
        )
        result = await self.pipeline.search(
            str(data.get("question") or ""), session_id=data.get("session_id"), options=options
        )

        status = 200
        if not result.success and result.error and not result.results:
            status = _STATUS_BY_CODE.get(result.error.code, 500)
        return web.json_response(to_payload(result), status=status)

    async def _handle_related(self, request: web.Request) -> web.Response:
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data
        url = data.get("url")
        if not isinstance(url, str) or not url:
            return web.json_response({"success": False, "error": "url is required"}, status=400)

        related = await self.pipeline.get_related_documentation(url)
        return web.json_response({"url": url, "results": [to_payload(result) for result in related]})

    async def _handle_read(self, request: web.Request) -> web.Response:
        data = await self._read_json(request)
        if isinstance(data, web.Response):
            return data
        url = data.get("url")
        max_length = data.get("max_length")
        if not isinstance(url, str) or not url:
            return web.json_response({"success": False, "error": "url is required"}, status=400)
        if max_length is not None and (not isinstance(max_length, int) or max_length < 1):
            return web.json_response({"success": False, "error": "max_length must be a positive integer"}, status=400)

        response = await self.pipeline.read_documentation(url, max_length)
        if not response.success and response.error:
            return _error_response(ErrorDetail.from_code(response.error.code, response.error.message))
        return web.json_response({"url": url, **response.model_dump(mode="json")})

    async def _handle_cache_stats(self, request: web.Request) -> web.Response:
        return web.json_response(self.pipeline.search_service.get_cache_stats())

    async def _handle_clear_cache(self, request: web.Request) -> web.Response:
        self.pipeline.search_service.clear_cache()
        return web.json_response({"status": "cleared"})

    @staticmethod
    async def _read_json(request: web.Request) -> dict[str, Any] | web.Response:
        try:
            data = await request.json()
        except json.JSONDecodeError:
            return web.json_response({"success": False, "error": "Request body must be valid JSON"}, status=400)
        if not isinstance(data, dict):
            return web.json_response({"success": False, "error": "Request body must be a JSON object"}, status=400)
        return data

    async def start(self) -> web.AppRunner:
        """Start the web server."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        await site.start()
        logger.info(f"Web server started on http://{self.host}:{self.port}")
        return runner

    async def stop(self, runner: web.AppRunner) -> None:
        """Stop the web server."""
        await runner.cleanup()
        logger.info("Web server stopped")
