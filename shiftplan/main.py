from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftplan.api.v1.auth.router import router as auth_router
from shiftplan.api.v1.calendar.router import router as calendar_router
from shiftplan.api.v1.leaves.router import router as leaves_router
from shiftplan.api.v1.navigation.router import router as navigation_router
from shiftplan.api.v1.schedules.router import router as schedules_router
from shiftplan.core.config import settings
from shiftplan.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Shift Schedule Manager")

    # CORS: allow the single-page frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(navigation_router)
    app.include_router(calendar_router)
    app.include_router(schedules_router)
    app.include_router(leaves_router)

    return app


app = create_app()
