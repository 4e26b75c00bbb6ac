import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


def _request_context(request: Request) -> dict:
    """Caller and exam for the log line, filled in once routing and auth have run."""
    return {
        "user_id": getattr(request.state, "user_id", None),
        "role": getattr(request.state, "role", None),
        "exam_id": request.scope.get("path_params", {}).get("exam_id"),
    }


def _describe(context: dict) -> str:
    parts = []
    if context["user_id"] is not None:
        parts.append(f"user={context['user_id']}({context['role']})")
    if context["exam_id"] is not None:
        parts.append(f"exam={context['exam_id']}")
    return f" [{' '.join(parts)}]" if parts else ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            context = _request_context(request)
            logger.error(
                f"[{request_id}] {method} {path} - ERROR{_describe(context)}",
                extra={"request_id": request_id, "method": method, "path": path,
                       "duration_ms": duration_ms, "error": str(exc), **context},
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        status_code = response.status_code
        context = _request_context(request)

        log_level = logging.WARNING if status_code >= 400 else logging.INFO
        logger.log(
            log_level,
            f"[{request_id}] {method} {path} - {status_code} ({duration_ms}ms){_describe(context)}",
            extra={"request_id": request_id, "method": method, "path": path,
                   "status_code": status_code, "duration_ms": duration_ms, **context},
        )

        response.headers["X-Request-ID"] = request_id
        return response
