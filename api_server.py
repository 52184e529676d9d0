"""
DietQuality API Server
Diet Quality Questionnaire (DQQ) indicators over HTTP.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.health.router import router as health_router

API_VERSION = "1.0.0"

# ============================================
# Logging
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("api_server")

# ============================================
# App Configuration
# ============================================
app = FastAPI(
    title="DietQuality API",
    description="Diet Quality Questionnaire indicator engine",
    version=API_VERSION
)

# ============================================
# CORS Configuration
# ============================================
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health_router)


@app.get("/")
def root():
    return {"service": "DietQuality API", "version": API_VERSION, "status": "ok"}
