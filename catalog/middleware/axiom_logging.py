"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API call to Axiom: method, path, route
template, params, masked JSON body, status code, duration, and the error
detail of failed calls (e.g. the Conflict message of a refused category
deletion). Passes requests through untouched when Axiom is not configured.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from catalog.config import settings

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        # 일괄 삭제 ID 목록 등 긴 배열은 앞부분만 — Keep only the head of long lists
        return [_mask(item, depth + 1) for item in data[:50]]
    return data


async def _read_json_body(request: Request) -> Any:
    """요청 본문을 JSON으로 읽습니다 — Read the request body as masked JSON."""
    if request.method not in _BODY_METHODS:
        return None
    body_bytes: bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return _mask(json.loads(body_bytes))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


def _error_detail(body: bytes) -> str:
    """오류 응답 본문에서 사유를 추출합니다 — Extract the detail of an error response."""
    try:
        data = json.loads(body)
        detail = data.get("detail", data) if isinstance(data, dict) else data
        text = detail if isinstance(detail, str) else json.dumps(detail, default=str)
    except (json.JSONDecodeError, UnicodeDecodeError):
        text = body.decode("utf-8", errors="replace")
    return text[:500]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs every API request and response to Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Axiom 미설정 또는 제외 경로 — Pass through when disabled or skipped
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started: float = time.perf_counter()
        event: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        request_body = await _read_json_body(request)
        if request_body is not None:
            event["request_body"] = request_body

        try:
            response: Response = await call_next(request)
            event["status_code"] = response.status_code

            route = request.scope.get("route")
            if route is not None:
                event["route"] = getattr(route, "path", None)
            if request.path_params:
                event["path_params"] = dict(request.path_params)

            if response.status_code >= 400:
                # 본문을 소비했으므로 응답을 다시 구성 — Rebuild the response after consuming its body
                body = b""
                async for chunk in response.body_iterator:
                    body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event["error"] = _error_detail(body)
                response = Response(
                    content=body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            try:
                self._client.ingest_events(self._dataset, [event])
            except Exception:
                pass  # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break request on log failure

        return response
