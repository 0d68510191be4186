"""CORS for the browser client of the task API."""
from typing import Any, Dict, List, Mapping, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_FRONTEND_URL = "http://localhost:5173"

# Local dev servers that may always call a non-production API
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]


def cors_settings(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    CORSMiddleware keyword arguments for the current environment.

    Production admits only FRONTEND_URL and the methods the API serves;
    anything else admits the dev servers plus FRONTEND_URL.
    """
    environ = os.environ if environ is None else environ
    environment = environ.get("ENVIRONMENT", "development")
    frontend_url = environ.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL

    if environment == "production":
        return {
            "allow_origins": [frontend_url],
            "allow_methods": ["GET", "POST", "PUT", "DELETE"],
            "allow_headers": ["Content-Type"],
        }

    origins: List[str] = list(DEV_ORIGINS)
    if frontend_url not in origins:
        origins.append(frontend_url)
    return {
        "allow_origins": origins,
        "allow_credentials": True,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }


def add_cors_middleware(app: FastAPI) -> None:
    settings = cors_settings()
    logger.info(f"[CORS] Allowed origins: {settings['allow_origins']}")
    app.add_middleware(CORSMiddleware, **settings)
