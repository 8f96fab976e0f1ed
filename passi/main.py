import logging

from fastapi import FastAPI

from passi.core.config import LOG_LEVEL, validate_runtime_config
from passi.core.credentials import CredentialStore
from passi.core.deps import get_gateway
from passi.core.logging_middleware import LoggingMiddleware
from passi.db.init_db import init_db
from passi.routers.answers import router as answers_router
from passi.routers.groups import router as groups_router
from passi.routers.users import router as users_router
from passi.services.directory import load_credentials

logging.basicConfig(level=LOG_LEVEL)

app = FastAPI(title="Passi")

# Middleware
app.add_middleware(LoggingMiddleware)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    validate_runtime_config()
    init_db()

    store = CredentialStore()
    store.load(load_credentials(get_gateway()))
    app.state.credentials = store


# Include routers
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(groups_router, prefix="/groups", tags=["groups"])
app.include_router(answers_router, prefix="/answers", tags=["answers"])
