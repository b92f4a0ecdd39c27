from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import os

# Only load .env file if not running on Heroku
if not os.getenv("DYNO"):  # DYNO is a Heroku-specific environment variable
    from dotenv import load_dotenv
    load_dotenv()
    print("🔧 Local development: Loaded .env file")
else:
    print("☁️ Running on Heroku: Using environment variables")

from config.settings import settings
from api import image_edit, editor
from services.edit_session import EditSession
from services.gemini_service import GeminiImageService


def create_app(edit_service: Optional[GeminiImageService] = None) -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One editor workflow per process
    app.state.edit_session = EditSession(edit_service)

    # Include API routers
    app.include_router(image_edit.router, prefix=settings.API_V1_STR)
    app.include_router(editor.router, prefix=settings.API_V1_STR)

    @app.get("/")
    async def root():
        return {"message": f"{settings.PROJECT_NAME} API is running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/api/health")
    async def api_health_check():
        return {"status": "healthy", "service": "api"}

    @app.get("/api/environment")
    async def get_environment_info():
        is_heroku = bool(os.getenv("DYNO"))
        return {
            "environment": "heroku" if is_heroku else "local",
            "is_heroku": is_heroku,
            "dyno": os.getenv("DYNO"),
            "port": os.getenv("PORT", str(settings.PORT)),
            "config_source": "heroku_env" if is_heroku else "dotenv_file",
            "gemini_configured": settings.has_gemini_key
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(app, host="0.0.0.0", port=port)
