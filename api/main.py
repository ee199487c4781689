import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes.config import router as config_router
from api.routes.export import router as export_router
from api.routes.extract import router as extract_router
from api.routes.version import router as version_router
from api.constants import API_VERSION


def create_app() -> FastAPI:
    app = FastAPI(title="Playlist Probe API", version=API_VERSION)

    # CORS configuration for internal network use
    allowed_origins = os.environ.get("CORS_ORIGINS", "*").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Routes carry their /api/ prefix in their definitions
    app.include_router(config_router, tags=["config"])
    app.include_router(extract_router, tags=["extract"])
    app.include_router(export_router, tags=["export"])
    app.include_router(version_router, tags=["version"])

    @app.get("/")
    async def root():
        return {"message": "Playlist Probe API is running"}

    return app


app = create_app()
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
