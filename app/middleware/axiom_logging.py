"""Axiom 요청 로깅 미들웨어.

Axiom request logging middleware. Every API call becomes one structured
event (method, path, params, masked body, status, duration, error detail).
Without AXIOM_API_TOKEN/AXIOM_DATASET the middleware is a pass-through.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

# 마스킹 대상 키 — Keys masked in bodies and query strings (accessToken, refresh_token, ...)
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential|id_identification)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_MAX_DEPTH = 5
_MAX_LIST_ITEMS = 20
_MAX_BODY_CHARS = 2000
_MAX_ERROR_CHARS = 500


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 필드 재귀 마스킹 — Recursively mask sensitive keys in dicts and lists."""
    if depth > _MAX_DEPTH:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:_MAX_LIST_ITEMS]]
    return data


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "...(truncated)"


async def _read_body(request: Request) -> Any:
    """JSON 요청 본문 — 마스킹 후 반환, JSON이 아니면 표시 문자열."""
    body_bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return mask_sensitive(json.loads(body_bytes))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


async def _capture_error(response: Response) -> tuple[Response, str]:
    """에러 응답 본문에서 detail 추출 후 응답을 다시 구성합니다.

    The streamed body is consumed to read ``detail``, so a new response
    carrying the same bytes is returned.
    """
    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        detail: Any = json.loads(body).get("detail", "")
        detail = detail if isinstance(detail, str) else json.dumps(detail, ensure_ascii=False)
    except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        detail = body.decode("utf-8", errors="replace")

    rebuilt = Response(
        content=body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    return rebuilt, _clip(detail, _MAX_ERROR_CHARS)


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 기록하는 미들웨어."""

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._dataset: str = settings.AXIOM_DATASET
        self._client: AxiomClient | None = None
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    def _ingest(self, event: dict[str, Any]) -> None:
        """이벤트 전송 — 실패는 로그로만 남김 (ingest failure never fails the request)."""
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            logger.warning("Axiom ingest failed for %s %s", event.get("method"), event.get("path"), exc_info=True)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}
        if request.query_params:
            event["query_params"] = mask_sensitive(dict(request.query_params))
        if request.method in ("POST", "PUT", "PATCH"):
            body = await _read_body(request)
            if body is not None:
                event["request_body"] = _clip(json.dumps(body, ensure_ascii=False, default=str), _MAX_BODY_CHARS)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                response, event["error"] = await _capture_error(response)
            return response
        except Exception as exc:
            event["error"] = _clip(f"{type(exc).__name__}: {exc}", _MAX_ERROR_CHARS)
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            self._ingest(event)
