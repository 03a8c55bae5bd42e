from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import logger, APP_NAME, ALLOWED_ORIGINS

# Routers
from routers import submit, admin  # type: ignore

app = FastAPI(title=APP_NAME)

# ---- CORS setup ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Security headers ---
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("X-Frame-Options", "DENY")
    return response


app.include_router(submit.router)
app.include_router(admin.router)


@app.on_event("startup")
async def _init_services():
    # Tests may install their own services before startup
    if getattr(app.state, "services", None) is None:
        from core.services import build_services
        app.state.services = build_services()
        logger.info("Services initialized")


@app.on_event("shutdown")
async def _close_services():
    services = getattr(app.state, "services", None)
    if services is not None:
        from core.services import close_services
        await close_services(services)
        app.state.services = None
        logger.info("Services released")


@app.get("/health")
async def health():
    return {"ok": True}


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
