from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.logging import configure_logging, get_logger
from .rules.registry import get_registry
from .api.routes.misc import router as misc_router
from .api.routes.triage import router as triage_router

app = FastAPI(title="Screening Triage Engine", version=settings.API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def on_startup():
    configure_logging()
    # RegistryConfigError propagates: a bad rule set must stop the service
    registry = get_registry()
    get_logger(__name__).info("startup_complete", env=settings.APP_ENV, rules=len(registry.rules))

app.include_router(misc_router)
app.include_router(triage_router)
