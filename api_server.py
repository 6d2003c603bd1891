#!/usr/bin/env python
"""Run the FastAPI server."""

import os
import sys

import uvicorn

# Add parent directory to path for development
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def main():
    """Run the FastAPI application."""
    uvicorn.run(
        "propsnap.api.app:app",
        host=os.getenv("PROPSNAP_HOST", "0.0.0.0"),
        port=int(os.getenv("PROPSNAP_PORT", "8000")),
        reload=os.getenv("PROPSNAP_RELOAD", "false").lower() == "true",
        log_level="info"
    )


if __name__ == "__main__":
    main()
