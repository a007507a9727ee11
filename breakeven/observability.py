# breakeven/observability.py
import logging
import sys
import time

from starlette.middleware.base import BaseHTTPMiddleware

from breakeven.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging() -> None:
    """Configure the root logger once, at the level from LOG_LEVEL."""
    root = logging.getLogger()
    if any(getattr(h, "_breakeven", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._breakeven = True  # marks our handler so reloads don't add a second one
    root.addHandler(handler)
    root.setLevel(get_settings().log_level.upper())

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()

        # only read session if SessionMiddleware already attached it
        sess = request.scope.get("session")  # may be None on early errors
        user_id = sess.get("user_id") if sess else None

        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logging.getLogger("breakeven.req").info(
            "%s %s -> %s in %.1fms user=%s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            user_id,
        )
        return response
