#!/usr/bin/env python3
"""
Start script - runs the ticker API under uvicorn, honouring the PORT
environment variable.
"""
import os

if __name__ == "__main__":
    import uvicorn

    from core.config import settings

    port = int(os.getenv("PORT", settings.app_port))

    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=port,
        log_level=settings.log_level.lower()
    )
