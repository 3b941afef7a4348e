"""
Chronos Debug Server

Serves the chronos debug snapshot and health endpoints for local development.

Environment Variables:
    CHRONOS_ENABLED: Enable measure collection (default: true)
    CHRONOS_AUTO_SAVE_ON_STOP: Flush after every completed measure (default: true)
    CHRONOS_IDLE_TIMEOUT_MS: Maximum deferral of a flush slice (default: 2000)
    CHRONOS_IDLE_BUDGET_MS: Budget granted to each flush slice (default: 50)
    CHRONOS_LOG_LEVEL: Log level for the chronos logger (default: INFO)
    CHRONOS_LOG_FILE: Optional rotating log file path
    HOST: Server host address (default: 127.0.0.1)
    PORT: Server port (default: 8010)

CLI Usage:
    python main.py

    # Write delivered measures to a log file as well
    CHRONOS_LOG_FILE=logs/chronos.log python main.py
"""

import os

import uvicorn

from chronos.core.config import settings

if __name__ == "__main__":
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", 8010))

    print(f"Starting {settings.PROJECT_NAME} debug server on {host}:{port}")
    print(f"Measures: {'enabled' if settings.ENABLED else 'disabled'}")

    uvicorn.run(
        "chronos.api.app:app",
        host=host,
        port=port,
        log_level="info",
    )
