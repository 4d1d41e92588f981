# server.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from topic_resource.api.routers import api_router
from topic_resource.core.config import get_settings
from topic_resource.core.errors import install_exception_handlers
from topic_resource.core.logging import setup_logging

settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(
    title="MSK Topic Resource API",
    version="1.0.0",
    # Put OpenAPI/docs under /api/v1 for consistency with the REST prefix
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
)

# --- CORS: only when origins are configured (settings.cors_allow_origins) ---
if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

install_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=True)
