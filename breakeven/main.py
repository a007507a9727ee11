# breakeven/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from breakeven.config import get_settings
from breakeven.errors import BreakEvenError
from breakeven.observability import RequestLogMiddleware, setup_logging
from breakeven.routers.auth import me_router
from breakeven.routers.auth import router as auth_router
from breakeven.routers.budget import router as budget_router
from breakeven.routers.daily import router as daily_router
from breakeven.routers.expenses import router as expenses_router
from breakeven.routers.subscriptions import router as subscriptions_router
from breakeven.routers.system import router as system_router

settings = get_settings()
setup_logging()

app = FastAPI(title="BreakEven", version="1.0.0")

# Middleware order: session first, then logging
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie=settings.session_cookie,
    max_age=60 * 60 * 24 * 30,  # 30 days
    same_site="lax",
)
app.add_middleware(RequestLogMiddleware)


# Errors: one JSON shape, {"error": "..."}
@app.exception_handler(BreakEvenError)
async def breakeven_error_handler(request: Request, exc: BreakEvenError):
    if exc.status_code >= 500:
        logging.getLogger("breakeven.error").error(
            "%s %s failed: %s", request.method, request.url.path, exc.message
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"error": "Invalid request body", "details": exc.errors()}),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(me_router)
app.include_router(budget_router)
app.include_router(daily_router)
app.include_router(expenses_router)
app.include_router(subscriptions_router)
