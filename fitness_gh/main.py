import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fitness_gh.core import config
from fitness_gh.core.errors import register_exception_handlers
from fitness_gh.core.logging_config import setup_logging
from fitness_gh.api.routes import auth, users, gyms, subscriptions, payments, marketplace, health

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)


# ============================================
# APP INIT
# ============================================

app = FastAPI(title="Fitness GH API", version=health.VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "X-Payment-Signature"],
)

register_exception_handlers(app)


# ============================================
# ROUTERS
# ============================================

app.include_router(health.router)
for module in (auth, users, gyms, subscriptions, payments, marketplace):
    app.include_router(module.router, prefix=config.API_PREFIX)


@app.on_event("startup")
def prepare_database():
    if config.RUN_MIGRATIONS:
        from fitness_gh.db.migrate import run_migrations
        run_migrations()
    else:
        from fitness_gh.db.init_db import init_db
        init_db()
    logger.info("Fitness GH API started")


@app.get("/")
def root():
    return {"status": "Fitness GH API running"}
