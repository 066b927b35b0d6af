import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

# Force load .env from the script's directory
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
load_dotenv(dotenv_path=env_path, override=True)

from lesson_pacing import init_lesson_pacing_module, router as lesson_pacing_router  # noqa: E402
from lesson_pacing.database import engine  # noqa: E402

IS_PRODUCTION = os.getenv("RENDER") == "true" or engine.dialect.name == "postgresql"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        logger.info("Initializing lesson pacing module...")
        init_lesson_pacing_module()
        logger.info("Lesson pacing module initialized.")
    except Exception as e:
        logger.error(f"Startup lesson pacing module error: {e}")
    yield
    logger.info("Shutting down...")


app = FastAPI(title="ClassBridge Lesson Pacing API", lifespan=lifespan)

# --- CORS Configuration ---
origins = [
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    "http://localhost:5173",
    "https://ed-tech-portal.vercel.app",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_origin_regex=r"https://.*\.(vercel\.app|onrender\.com)" if IS_PRODUCTION else None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lesson_pacing_router)


@app.get("/api/health")
def health_check():
    """Health check endpoint to verify backend is running and configured correctly"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy",
        "message": "ClassBridge Lesson Pacing is running",
        "environment": "production" if IS_PRODUCTION else "development",
        "database": db_status,
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
