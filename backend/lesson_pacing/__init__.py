from .database import Base, engine
from .routes import router


def init_lesson_pacing_module() -> None:
    Base.metadata.create_all(bind=engine)


__all__ = ["router", "init_lesson_pacing_module"]
