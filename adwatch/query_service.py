#!/usr/bin/env python3
"""
FastAPI app exposing the latest stitched ad finding.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .latest_state import LatestState


def create_app(latest: LatestState) -> FastAPI:
    """Build the read-only query app around an existing state slot."""
    app = FastAPI(title="adwatch")

    # Read from browser overlays on arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/")
    def current_stitched():
        # Sync handler: runs on the thread pool and only reads the slot
        event = latest.get()
        return {"data": event.model_dump(mode="json") if event is not None else None}

    return app
