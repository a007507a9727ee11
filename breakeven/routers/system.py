# breakeven/routers/system.py
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse  # plain "ok" for probes

router = APIRouter()  # group of routes


@router.get("/healthz", response_class=PlainTextResponse)  # tiny health check
def healthz():
    return "ok"


@router.get("/")  # banner so a browser hit shows something useful
def home():
    return {"message": "BreakEven API", "version": "1.0", "endpoints": "/api/v1"}
