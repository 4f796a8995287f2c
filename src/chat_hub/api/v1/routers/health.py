from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from chat_hub.api.deps import HubDep

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(hub: HubDep) -> JSONResponse:
    if not hub.running:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": ["hub: control loop not running"]},
        )
    return JSONResponse(content={"status": "ready"})
