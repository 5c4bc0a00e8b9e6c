# app/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.middleware import register_middleware
from app.db.session import create_tables
from app.errors import register_all_errors
from app.api.routers import attachments, auth, comments, complaints

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")
    await create_tables()
    yield
    await app.state.rate_limiter.close()
    logger.info("Shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Complaint intake, tracking and triage API.",
    version="0.1.0",
    lifespan=lifespan,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
)

Instrumentator().instrument(app).expose(app)

register_all_errors(app)
register_middleware(app)

prefix = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(complaints.router, prefix=f"{prefix}/complaints", tags=["Complaints"])
app.include_router(attachments.router, prefix=f"{prefix}/complaints", tags=["Attachments"])
app.include_router(comments.router, prefix=f"{prefix}/complaints/{{id}}/comments", tags=["Comments"])


@app.get("/health", tags=["Health Check"])
async def health():
    return {
        "success": True,
        "message": "Server is healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=3001, reload=settings.ENVIRONMENT == "development")
