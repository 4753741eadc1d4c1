import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# LSM triple store / SPARQL endpoint
LSM_SERVER_HOST = os.getenv("LSM_SERVER_HOST", "http://localhost:8080/lsm-light.server/")
LSM_SPARQL_ENDPOINT = os.getenv("LSM_SPARQL_ENDPOINT", "http://localhost:8890/sparql")
LSM_OAUTH_GRAPH_URL = os.getenv("LSM_OAUTH_GRAPH_URL", "http://lsm.deri.ie/OpenIoT/OAuth#")
OPENIOT_RESOURCE_NAMESPACE = os.getenv("OPENIOT_RESOURCE_NAMESPACE", "http://lsm.deri.ie/resource/")
LSM_HTTP_TIMEOUT = float(os.getenv("LSM_HTTP_TIMEOUT", "30"))

# Persistence
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reqdef.db")

# Design sessions idle longer than this many seconds are dropped (0 keeps them)
SESSION_IDLE_TIMEOUT = float(os.getenv("SESSION_IDLE_TIMEOUT", "3600"))

# Graph design
ROOT_NODE_TYPES = _split(os.getenv("ROOT_NODE_TYPES", "SOURCE"))

# API
CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", "http://localhost:5173"))
