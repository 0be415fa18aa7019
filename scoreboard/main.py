"""
FastAPI main application
Scoreboard Registration Server - team registration and login

Routers in scoreboard/api/:
- health.py: Health check and system status
- index.py: register_team, register_names and login_team actions

All routers access shared state via scoreboard.state module.
"""
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from scoreboard import state
from scoreboard.api import health, index
from scoreboard.config import load_settings, seed_store
from scoreboard.models import ActionResponse, Settings
from scoreboard.services.config_gate import ConfigGate, ConfigMissing
from scoreboard.services.credentials import CredentialService
from scoreboard.services.login import LoginResolver
from scoreboard.services.logos import LogoCatalog, LogoResolver
from scoreboard.services.registrar import TeamRegistrar
from scoreboard.services.sessions import SessionIssuer
from scoreboard.services.tokens import TokenService
from scoreboard.store import BaseStore, create_store


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_services(store: BaseStore, settings: Settings) -> None:
    """Wire the services on top of a store and publish them in state"""
    config = ConfigGate(store)
    credentials = CredentialService(store, rounds=settings.bcrypt_rounds)
    login = LoginResolver(store, config, credentials, SessionIssuer(credentials))
    logos = LogoCatalog(store, settings.logo_dir, settings.logo_url_prefix)

    state.STORE = store
    state.SESSIONS.ttl = settings.session_ttl
    state.LOGIN = login
    state.REGISTRAR = TeamRegistrar(
        store, config, TokenService(store), LogoResolver(logos), credentials, login
    )


def _ensure_sqlite_dir(database_url: str) -> None:
    prefix = "sqlite:///"
    if database_url.startswith(prefix) and database_url != prefix + ":memory:":
        Path(database_url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: open the store, seed it and wire services into global state
    try:
        settings = load_settings()
        _ensure_sqlite_dir(settings.database_url)
        store = create_store(settings.database_url)
        await store.init()
        await seed_store(store, settings)
        build_services(store, settings)
        logger.info(f"✅ Server started with {type(store).__name__}")
    except Exception as e:
        logger.error(f"❌ Failed to start: {e}")
        raise

    yield

    # Shutdown
    cleared = state.SESSIONS.clear()
    logger.info(f"🛑 Server shutting down, dropped {cleared} sessions")


# Create FastAPI app
app = FastAPI(
    title="Scoreboard Registration Server",
    description="Team registration and login for a competition scoreboard",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigMissing)
async def config_missing_handler(request: Request, exc: ConfigMissing):
    """A misconfigured deployment answers with a generic failure"""
    logger.error(f"Refusing request to {request.url.path}: flag '{exc}' missing")
    body = ActionResponse.error_response("Internal error", "index")
    return JSONResponse(status_code=500, content=body.model_dump())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """Store and file errors keep the action response shape"""
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    body = ActionResponse.error_response("Internal error", "index")
    return JSONResponse(status_code=500, content=body.model_dump())


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Registration and login (POST /index/ajax)
app.include_router(index.router)


# ==================== STATIC FILES ====================

# Mount static files directory for CSS/JS/images
if Path("static").exists():
    app.mount("/static", StaticFiles(directory="static"), name="static")


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
