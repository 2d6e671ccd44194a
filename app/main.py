import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.diary.router import router as diary_router
from app.api.v1.fee_structures.router import router as fee_structures_router
from app.api.v1.teachers.router import router as teachers_router
from app.api.v1.transport.router import router as transport_router
from app.core.config import settings
from app.core.error_handlers import register_exception_handlers


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="School ERP Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every error leaves as {success: false, message, error?}
    register_exception_handlers(app)

    # Routers
    app.include_router(fee_structures_router)
    app.include_router(teachers_router)
    app.include_router(transport_router)
    app.include_router(diary_router)
    app.include_router(attendance_router)

    return app


app = create_app()
