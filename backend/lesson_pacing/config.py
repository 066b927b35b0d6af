import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv(
        "LESSON_PACING_DATABASE_URL", f"sqlite:///{os.path.join(BACKEND_DIR, 'class_bridge.db')}"
    )
    jwt_secret: str = os.getenv("LESSON_PACING_JWT_SECRET", os.getenv("JWT_SECRET", "change-me-in-production"))
    jwt_algorithm: str = os.getenv("LESSON_PACING_JWT_ALGORITHM", "HS256")
    jwt_exp_minutes: int = int(os.getenv("LESSON_PACING_JWT_EXP_MINUTES", "60"))
    # Share of available slots the planner may fill; the rest is headroom for lost days.
    utilization_ceiling: float = float(os.getenv("LESSON_PACING_UTILIZATION_CEILING", "0.85"))
    max_simulation_days: int = int(os.getenv("LESSON_PACING_MAX_SIMULATION_DAYS", "365"))
    fallback_year_days: int = int(os.getenv("LESSON_PACING_FALLBACK_YEAR_DAYS", "365"))


settings = Settings()
