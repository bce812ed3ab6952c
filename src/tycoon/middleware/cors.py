"""CORS for the browser game client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tycoon.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the game client origins; the API only reads, creates and patches."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )
