import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.exceptions import register_exception_handlers
from .api.routes import router as accounts_router, transfer_router
from .core.config import get_settings
from .services import AccountStore

settings = get_settings()
logging.basicConfig(level=settings.log_level)

def create_app(store: Optional[AccountStore] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or AccountStore.from_settings(settings)
        app.state.store.open()
        yield
        app.state.store.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(accounts_router)
    app.include_router(transfer_router)
    register_exception_handlers(app)

    @app.get("/")
    def read_root() -> dict[str, str]:
        return {"status": "Online Bank API is running"}

    @app.get("/health")
    def read_health() -> dict[str, str]:
        return {"status": "ok"}

    return app

app = create_app()
