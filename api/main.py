import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core import middleware
from core.context import AppContext, get_context
from core.db import Database
from core.log_sink import LogSink
from core.mailer import Mailer
from core.settings import Settings
from logs import router as logs_router
from mail import router as mail_router
from users import router as users_router
from users.repository import UserRepository

logger = logging.getLogger(__name__)


def build_context(settings: Settings) -> AppContext:
    database = Database(settings.database_url)
    return AppContext(
        settings=settings,
        users=UserRepository(database),
        log_sink=LogSink(
            service=settings.service_name,
            url=settings.mongo_url,
            db_name=settings.mongo_db_name,
            auth_source=settings.mongo_auth_source,
        ),
        mailer=Mailer(
            host=settings.mail_host,
            port=settings.mail_port,
            default_sender=settings.mail_from,
        ),
        database=database,
    )


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(settings: Settings | None = None, context: AppContext | None = None) -> FastAPI:
    settings = settings or (context.settings if context is not None else Settings.from_env())
    context = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Open connections once per process.
        await context.start()
        app.state.context = context
        context.log_sink.record(
            "info",
            "Servidor iniciado correctamente",
            {"port": settings.port, "services": ["postgres", "mongodb", "mailhog"]},
        )
        try:
            yield
        finally:
            context.log_sink.record("info", "Servidor cerrándose", {})
            await context.close()

    app = FastAPI(title="usuarios-api", lifespan=lifespan)

    # Allow the frontend container and its dev server to call this API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    middleware.install(app)

    app.include_router(users_router.router, tags=["usuarios"])
    app.include_router(logs_router.router, tags=["logs"])
    app.include_router(mail_router.router, tags=["mail"])

    @app.get("/")
    async def root(request: Request, ctx: AppContext = Depends(get_context)) -> dict:
        ctx.log_sink.record(
            "info",
            "Acceso a ruta principal",
            {
                "ip": request.client.host if request.client else None,
                "userAgent": request.headers.get("user-agent"),
            },
        )
        return {
            "success": True,
            "message": "API de usuarios funcionando correctamente",
            "timestamp": _utc_iso(),
            "services": {
                "database": "Postgres para usuarios",
                "mongodb": "MongoDB para logs",
                "mail": "MailHog configurado",
                "status": "Operativo",
            },
        }

    @app.get("/health")
    async def health(ctx: AppContext = Depends(get_context)) -> dict:
        store_ok = await ctx.users.ping()
        health_data = {
            "status": "healthy" if store_ok and ctx.log_sink.is_connected else "degraded",
            "uptime": ctx.uptime(),
            "timestamp": _utc_iso(),
            # Key names are kept stable for existing dashboards; `mysql` is the user store.
            "services": {
                "mysql": "connected" if store_ok else "disconnected",
                "mongodb": "connected" if ctx.log_sink.is_connected else "disconnected",
                "mailhog": "configured",
            },
        }
        ctx.log_sink.record("info", "Health check realizado", health_data)
        return {"success": True, **health_data}

    return app


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
