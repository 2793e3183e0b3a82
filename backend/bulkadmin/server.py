"""Local HTTP surface the dashboard UI talks to for its session."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.auth import router as auth_router
from .api.session import router as session_router
from .logging import get_logger
from .runtime import SessionRuntime

logger = get_logger("api")


def create_session_app(runtime: SessionRuntime) -> FastAPI:
    """Create the FastAPI app around an already-built runtime."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        runtime.start()
        yield
        await runtime.aclose()
        logger.info("Session runtime stopped")

    app = FastAPI(
        title="Bulk SMS Admin Session",
        description="Session lifecycle for the bulk SMS admin dashboard",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    # CORS for the dashboard dev server (allow all 3000-range ports)
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1):30[0-9]{2}",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session_router)
    app.include_router(auth_router)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app
