#!/usr/bin/env python3
"""
Simple script to run the FastAPI server locally.

For local development: python run_api.py
(after ``pip install -e .``; settings are read from the environment and .env)
"""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "labsite.api.main:app",
        host=os.getenv("HOST", "127.0.0.1"),  # Default to localhost for security
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level="info"
    )
