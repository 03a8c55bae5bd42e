import hmac
from typing import List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from core.config import logger, TRUST_PROXY_HEADERS


def client_ip(request: Request, trust_proxy: Optional[bool] = None) -> str:
    if trust_proxy is None:
        trust_proxy = TRUST_PROXY_HEADERS
    forwarded = request.headers.get("X-Forwarded-For") if trust_proxy else None
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


def _extract_secret(request: Request) -> str:
    # Header takes precedence if provided
    h = (request.headers.get("X-Admin-Secret") or "").strip()
    if h:
        return h
    return (request.query_params.get("secret") or "").strip()


def require_admin(request: Request, configured_secret: str, allowlist_ips: Optional[List[str]] = None) -> Optional[JSONResponse]:
    """Return an error response when the caller is not an admin, else None."""
    if not configured_secret:
        return JSONResponse({"error": "admin_not_configured"}, status_code=503)
    provided = _extract_secret(request)
    if not provided or not hmac.compare_digest(provided.encode("utf-8"), configured_secret.encode("utf-8")):
        logger.warning(f"[admin] unauthorized request from ip={client_ip(request)}")
        return JSONResponse({"error": "unauthorized"}, status_code=401)
    if allowlist_ips:
        ip = client_ip(request)
        if ip not in allowlist_ips:
            logger.warning(f"[admin] forbidden ip={ip}")
            return JSONResponse({"error": "forbidden"}, status_code=403)
    return None
