from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from kousei.core.config import MAX_BODY_BYTES


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects oversized lint requests before the body is read."""

    async def dispatch(self, request: Request, call_next):
        cl = request.headers.get("content-length")
        if cl is not None:
            try:
                size = int(cl)
            except ValueError:
                return JSONResponse({"detail": "Bad Content-Length"}, status_code=400)
            if size > MAX_BODY_BYTES:
                return JSONResponse({"detail": "Request body too large"}, status_code=413)
        return await call_next(request)
