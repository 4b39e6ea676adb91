"""
Run the banana REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    PORT                Port to listen on (default: 4000)
    DB_PATH             SQLite database file path (default: banana.db)
    JWT_SECRET          Secret key for signing JWT tokens (change in production!)
    SESSION_SECRET      Session cookie signing key (default: JWT_SECRET)
    FRONTEND_URL        Where OAuth callbacks redirect to (default: http://localhost:3000)
    BACKEND_URL         Public URL of this API, used for OAuth callbacks
    GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET   Enable Google login
    GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET   Enable GitHub login
    LLM_PROVIDER        "openai", "groq", or "ollama" (default: openai)
    OPENAI_API_KEY      Required for the Oracle when LLM_PROVIDER=openai
"""

import os
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "4000")),
        reload=True,
    )
