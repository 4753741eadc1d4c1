import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from reqdef import config
from reqdef.api.routes import router
from reqdef.db.session import engine
from reqdef.db.models import Base
from reqdef.nodes.registry import get_node_registry
from reqdef.session.store import SessionStore

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="OpenIoT Request Definition",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)

# One store per process; handlers reach it through app.state
app.state.sessions = SessionStore(get_node_registry())


@app.on_event("startup")
def startup():
    retries = 5
    delay = 2

    for attempt in range(retries):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database connected")
            return
        except OperationalError:
            logger.warning("Waiting for database... (%d/%d)", attempt + 1, retries)
            time.sleep(delay)

    logger.warning("Database not ready, specifications will not be persisted")
