from fastapi import FastAPI
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.db.base import build_engine, build_session_maker, init_models
from app.core.logging import get_logger, setup_logging
from app.apis.study.main import router as study_router
from app.modules.study.state import build_study_session

import uvicorn
from fastapi.middleware.cors import CORSMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    engine = build_engine()
    await init_models(engine)
    session = build_study_session(build_session_maker(engine))
    await session.load()
    app.state.study_session = session
    logger.info(
        "Study session ready: %d history record(s), theme=%s",
        len(session.history),
        session.state.theme,
    )
    try:
        yield
    finally:
        await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(study_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        print(f"An error occurred when starting the server: {e}.")
