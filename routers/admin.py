from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from core.auth import require_admin
from core.config import logger
from core.errors import PersistenceError
from core.services import Services, get_services

router = APIRouter(prefix="/admin", tags=["admin"])  # secure endpoints via ADMIN_SECRET


@router.get("/submissions")
async def list_submissions(request: Request, services: Services = Depends(get_services)):
    """All stored submissions, newest first. Requires X-Admin-Secret."""
    denied = require_admin(request, services.admin_secret, services.admin_allowlist_ips)
    if denied is not None:
        return denied
    try:
        rows = await run_in_threadpool(services.store.list_all)
    except PersistenceError as ex:
        logger.exception(f"[admin] list submissions failed: {ex}")
        return JSONResponse({"error": "Server error", "details": ex.message}, status_code=500)
    logger.info(f"[admin] listed {len(rows)} submissions")
    return rows
