# portfolio/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
import logging

from portfolio.core.settings import settings
from portfolio.core.diagnostics import debug_log
from portfolio.routers.contact import router as contact_router
from portfolio.routers.health import router as health_router

log = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.api_title)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

log.info(f"[main] mail relay configured = {settings.mail_configured}, debug log = {settings.contact_debug_log}")

# Routers
app.include_router(contact_router)
app.include_router(health_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    debug_log(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    log.error(f"[main] unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error. Please try again later."},
    )


@app.get("/__routes")
async def __routes():
    return [
        {"methods": sorted(list(r.methods)), "path": r.path}
        for r in app.routes
        if isinstance(r, APIRoute)
    ]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("portfolio.main:app", host="0.0.0.0", port=8000)
