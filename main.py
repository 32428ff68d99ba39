"""
main.py: Server launcher and entry point.

Run this file to start the demand and pacing API:

    python main.py

Interactive API docs are served at http://127.0.0.1:8000/docs

This file does NOT contain application logic. See app.py for the FastAPI
application, service wiring, and startup sequence.

Direct uvicorn usage:
    uvicorn app:app --reload
"""

from __future__ import annotations

import uvicorn


HOST = "127.0.0.1"
PORT = 8000


def main() -> None:
    """Start the API server."""
    print("=" * 60)
    print("  Demand & Pacing Intelligence API")
    print("=" * 60)
    print(f"  Server  : http://{HOST}:{PORT}")
    print(f"  API docs: http://{HOST}:{PORT}/docs")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    uvicorn.run(
        "app:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
