# FILE: main.py
"""
Spec Quality Engine - FastAPI Application
Version: 0.1.0

Features:
- Pre-code simulation of Executable Specs (completeness, ambiguity,
  contradiction, testability -> coverage score)
- Spec compilation into hashed SpecDocuments
- Outcome evaluation with adversary review, scores persisted per spec
- Approval gate: draft -> locked, write-once, audited
"""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from app.db import init_db
from app.providers.registry import PROVIDERS, is_provider_available
from app.specs.router import router as specs_router

logging.basicConfig(
    level=os.getenv("SPEC_ENGINE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Spec Quality Engine",
    version="0.1.0",
    description="Scores, compiles, evaluates and locks executable specifications",
)

# ====== CORS ======

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:8000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== STARTUP ======

@app.on_event("startup")
def on_startup():
    init_db()

    logger.info("[startup] Checking reasoning providers...")
    for pid, cfg in PROVIDERS.items():
        if is_provider_available(pid):
            logger.info("[startup] %s: [OK] available", cfg.env_key_name)
        else:
            logger.info("[startup] %s: [X] not set - %s tier disabled", cfg.env_key_name, cfg.display_name)


app.include_router(specs_router)


# ====== PUBLIC ENDPOINTS ======

@app.get("/ping")
def ping():
    """Health check."""
    return {"status": "ok"}
