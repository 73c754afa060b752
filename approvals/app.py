import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from approvals.application import DashboardService, configure_dashboard_service, get_dashboard_service
from approvals.core.settings import Settings
from approvals.routes import auth, commands, documents


def create_app(service: DashboardService | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if service is not None:
        configure_dashboard_service(service)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await get_dashboard_service().aclose()

    app = FastAPI(title="Approvals Dashboard API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, prefix="/api")
    app.include_router(commands.router, prefix="/api")
    app.include_router(documents.router, prefix="/api")

    return app


app = create_app()
