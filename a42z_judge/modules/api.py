"""
a42z Judge Gateway - FastAPI Backend

Thin HTTP surface over the judge dispatch layer.

Endpoints:
- POST /api/{judge}            submit a repository / pitch document to one judge
- GET  /api/{judge}?data_id=   poll the stored result (readiness descriptor without data_id)
- PUT  /api/{judge}            merge fields into a stored result (keyed by request_id)
- GET  /api/{judge}/debug      redacted listing of everything stored for the judge
- POST /api/dify-proxy         free-form message to any judge
- POST /api/webhook/dify       asynchronous analysis events from the upstream platform
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from .adapters import JudgeGateway
from .dispatcher import ProxyDispatcher
from .errors import InvalidPayload, JudgeGatewayError, MissingField
from .judges import JudgeRegistry
from .persistence.archive import AnalysisArchive
from .persistence.db import Database
from .persistence.init import ensure_sqlite_schema
from .result_store import ResultStore
from .schemas import AnalysisRequest, DifyProxyRequest
from .settings import Settings
from .webhook import DifyWebhookEvent, WebhookInbox


API_VERSION = "1.0.0"
PROXY_DEFAULT_USER = "a42z_judge_user"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _read_json_object(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidPayload()
    if not isinstance(body, dict):
        raise InvalidPayload("JSON payload must be an object")
    return body


def _gateway(request: Request) -> JudgeGateway:
    return request.app.state.gateway


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _inbox(request: Request) -> WebhookInbox:
    return request.app.state.webhook_inbox


# =============================================================================
# APP FACTORY
# =============================================================================


def create_app(
    settings: Optional[Settings] = None,
    *,
    registry: Optional[JudgeRegistry] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the application with every collaborator constructed once here.

    Tests inject a registry and an ``httpx.MockTransport``; in production all
    of it comes from the environment.
    """
    settings = settings or Settings.from_env()
    registry = registry or JudgeRegistry.from_environment(config_path=settings.registry_config_path)
    if database is None and settings.archive_enabled:
        database = Database(settings.database_url)

    dispatcher = ProxyDispatcher.from_settings(registry, settings, transport=transport)
    archive = AnalysisArchive(database) if database is not None else None
    gateway = JudgeGateway(registry, dispatcher, ResultStore(), archive)

    app = FastAPI(
        title="a42z Judge Gateway",
        description="Proxy between the a42z judging UI and the upstream judge workflows",
        version=API_VERSION,
        docs_url="/docs" if not settings.production else None,
        redoc_url="/redoc" if not settings.production else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins if settings.production else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.webhook_inbox = WebhookInbox()
    app.state.database = database

    @app.exception_handler(JudgeGatewayError)
    async def _gateway_error_handler(request: Request, exc: JudgeGatewayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.on_event("startup")
    async def startup_event() -> None:
        logger.info(f"a42z Judge Gateway v{API_VERSION} starting up...")
        logger.info(f"Judges: {', '.join(registry.ids())}")
        if database is not None:
            await ensure_sqlite_schema(database)
        logger.info(
            f"Startup config: production={settings.production} upstream={settings.dify_api_url} "
            f"archive={'on' if archive is not None else 'off'} webhook_url={settings.webhook_url or 'unset'}"
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        logger.info("a42z Judge Gateway shutting down...")
        if database is not None:
            await database.dispose()

    _register_routes(app)
    return app


# =============================================================================
# ROUTES
# =============================================================================


def _register_routes(app: FastAPI) -> None:
    # Fixed paths first: /api/{judge} would otherwise capture them.

    @app.get("/")
    async def root(request: Request) -> Dict[str, Any]:
        """Service info and configuration health."""
        settings = _settings(request)
        gateway = _gateway(request)
        judges = gateway.registry.list_judges()
        unconfigured = [judge_id for judge_id, info in judges.items() if not info["configured"]]

        return {
            "name": "a42z Judge Gateway",
            "version": API_VERSION,
            "status": "degraded" if unconfigured else "healthy",
            "checks": {
                "judges_configured": len(judges) - len(unconfigured),
                "judges_missing_credentials": unconfigured,
                "archive": "enabled" if gateway.archive is not None else "disabled",
                "webhook_url": settings.webhook_url or None,
            },
            "judges": judges,
            "endpoints": {
                "submit": "POST /api/{judge} - Submit repo_url / repo_pdf to a judge",
                "query": "GET /api/{judge}?data_id= - Get a stored result",
                "update": "PUT /api/{judge} - Merge fields into a stored result",
                "debug": "GET /api/{judge}/debug - List stored results",
                "proxy": "POST /api/dify-proxy - Free-form message to a judge",
                "webhook": "POST /api/webhook/dify - Upstream analysis events",
            },
        }

    # -------------------------------------------------------------------------
    # Generic proxy
    # -------------------------------------------------------------------------

    @app.post("/api/dify-proxy")
    async def dify_proxy(request: Request) -> Dict[str, Any]:
        payload = await _read_json_object(request)
        try:
            body = DifyProxyRequest.model_validate(payload)
        except ValidationError as e:
            raise InvalidPayload(details=str(e))
        if not body.judge_type or not body.message:
            raise MissingField("judgeType", "judgeType and message are required")

        gateway = _gateway(request)
        judge = gateway.registry.resolve(body.judge_type)
        result = await gateway.dispatcher.dispatch(
            judge.id,
            body.message,
            body.inputs,
            user=body.user or PROXY_DEFAULT_USER,
        )
        return {
            "success": True,
            "data": result.payload(),
            "judgeType": judge.id,
            "judgeName": judge.display_name,
        }

    @app.get("/api/dify-proxy")
    async def dify_proxy_info(request: Request) -> Dict[str, Any]:
        return {
            "message": "Dify API Proxy is running",
            "available_judges": _gateway(request).registry.ids(),
            "usage": "POST with { judgeType, message, inputs }",
        }

    # -------------------------------------------------------------------------
    # Webhook
    # -------------------------------------------------------------------------

    @app.post("/api/webhook/dify")
    async def receive_webhook(request: Request) -> Dict[str, Any]:
        payload = await _read_json_object(request)
        try:
            event = DifyWebhookEvent.model_validate(payload)
        except ValidationError as e:
            raise InvalidPayload("Failed to process webhook", details=str(e))

        await _inbox(request).receive(event, signature=request.headers.get("x-dify-signature"))
        return {
            "success": True,
            "message": "Webhook received successfully",
            "conversation_id": event.conversation_id,
        }

    @app.get("/api/webhook/dify")
    async def query_webhook(request: Request, conversation_id: Optional[str] = None) -> Dict[str, Any]:
        if not conversation_id:
            return {
                "success": True,
                "message": "Webhook endpoint is ready",
                "available_methods": ["POST", "GET"],
                "note": "Use POST for webhook events, GET with conversation_id to query results",
                "endpoint": _settings(request).webhook_url or _settings(request).endpoint_url("/api/webhook/dify"),
            }

        event = await _inbox(request).get(conversation_id)
        return {"success": True, "result": event.model_dump(exclude_none=True)}

    @app.get("/api/webhook/dify/debug")
    async def list_webhook_results(request: Request) -> Dict[str, Any]:
        results = await _inbox(request).summaries()
        return {"success": True, "count": len(results), "results": results}

    # -------------------------------------------------------------------------
    # Per-judge routes
    # -------------------------------------------------------------------------

    @app.post("/api/{judge}")
    async def submit_analysis(judge: str, request: Request) -> JSONResponse:
        adapter = _gateway(request).adapter(judge)
        payload = await _read_json_object(request)

        try:
            analysis_request = AnalysisRequest.from_payload(adapter.judge_id, payload)
        except ValidationError as e:
            raise InvalidPayload(details=str(e))

        result = await adapter.submit(analysis_request)
        if not result.success:
            return JSONResponse(
                status_code=result.status_code or 500,
                content={
                    "success": False,
                    "error": f"Failed to process {adapter.judge.display_name} analysis",
                    "details": result.details or result.error,
                },
            )

        return JSONResponse(
            content={
                "success": True,
                "data": result.payload(),
                "data_id": result.request_id,
                "source": adapter.judge_id,
                "timestamp": _utc_now_iso(),
            }
        )

    @app.get("/api/{judge}")
    async def query_analysis(judge: str, request: Request, data_id: Optional[str] = None) -> Dict[str, Any]:
        adapter = _gateway(request).adapter(judge)
        if not data_id:
            return {
                "success": True,
                "message": f"{adapter.judge.display_name} API endpoint is ready",
                "available_methods": ["POST", "GET", "PUT"],
                "note": (
                    f"Use POST to send a {adapter.judge.display_name} analysis request, "
                    "GET with data_id to query received data"
                ),
                "endpoint": _settings(request).endpoint_url(f"/api/{adapter.judge_id}"),
            }

        result = await adapter.query(data_id)
        return {"success": True, "data": result.payload()}

    @app.put("/api/{judge}")
    async def update_analysis(judge: str, request: Request) -> Dict[str, Any]:
        adapter = _gateway(request).adapter(judge)
        payload = await _read_json_object(request)

        request_id = payload.get("request_id")
        if not isinstance(request_id, str) or not request_id.strip():
            raise MissingField("request_id", "request_id is required for updates")

        partial = {k: v for k, v in payload.items() if k != "request_id"}
        result = await adapter.update(request_id.strip(), partial)
        return {
            "success": True,
            "message": f"{adapter.judge.display_name} request updated successfully",
            "data": result.payload(),
        }

    @app.get("/api/{judge}/debug")
    async def list_debug(judge: str, request: Request) -> Dict[str, Any]:
        adapter = _gateway(request).adapter(judge)
        summaries = await adapter.list_debug()
        return {"success": True, "count": len(summaries), "data": summaries}
