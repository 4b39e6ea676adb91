"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment or passed
explicitly. Secret-bearing values may also come from mounted secret files;
a file always wins over the plain environment variable.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# API keys shipped in sample .env files; treated as "not configured".
_PLACEHOLDER_KEYS = {"placeholder-openai-key", "placeholder-groq-key", "changeme"}


def read_secret(name: str, default: str = "") -> str:
    """Read a secret from a mounted file, falling back to the environment.

    Lookup order:
        1. the file named by ``<NAME>_FILE``
        2. ``$SECRETS_DIR/<name lowercased>`` (SECRETS_DIR defaults to /run/secrets)
        3. the ``<NAME>`` environment variable
    """
    candidates = []
    explicit = os.getenv(f"{name}_FILE")
    if explicit:
        candidates.append(Path(explicit))
    candidates.append(Path(os.getenv("SECRETS_DIR", "/run/secrets")) / name.lower())

    for path in candidates:
        if path.is_file():
            return path.read_text(encoding="utf-8").strip()
    return os.getenv(name, default)


@dataclass(frozen=True)
class OAuthClientConfig:
    """Credentials for one OAuth provider."""
    provider: str
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the banana API.

    No module-level globals: construct via from_env() or pass explicitly
    in tests.
    """
    # Server
    port: int = 4000
    environment: str = "development"
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:3000"
    backend_url: str = "http://localhost:4000"

    # Database
    db_path: str = "banana.db"

    # Auth
    jwt_secret: str = "banana-secret"
    jwt_expiry_days: int = 7
    session_secret: str = ""
    session_max_age_seconds: int = 24 * 60 * 60

    # OAuth providers (a provider is enabled when both values are set)
    google_client_id: str = ""
    google_client_secret: str = ""
    github_client_id: str = ""
    github_client_secret: str = ""

    # ── Oracle LLM ──────────────────────────────────────────────
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "openai"
    llm_model: str = "gpt-4-turbo-preview"
    openai_api_key: str = ""
    groq_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434/"

    # Rate limiting (limits-library syntax)
    rate_limit: str = "100 per 15 minutes"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def effective_session_secret(self) -> str:
        return self.session_secret or self.jwt_secret

    @property
    def oracle_enabled(self) -> bool:
        """Whether the Oracle has what it needs to reach its model."""
        if self.llm_provider == "openai":
            return _usable_key(self.openai_api_key)
        if self.llm_provider == "groq":
            return _usable_key(self.groq_api_key)
        return self.llm_provider == "ollama"

    def oauth_clients(self) -> dict[str, OAuthClientConfig]:
        """Return the providers enabled for this deployment, keyed by name."""
        pairs = {
            "google": (self.google_client_id, self.google_client_secret),
            "github": (self.github_client_id, self.github_client_secret),
        }
        return {
            name: OAuthClientConfig(provider=name, client_id=cid, client_secret=secret)
            for name, (cid, secret) in pairs.items()
            if cid and secret
        }

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> Settings:
        """Build Settings from environment variables (and an optional .env)."""
        from dotenv import load_dotenv
        load_dotenv(env_file)

        return cls(
            port=int(os.getenv("PORT", "4000")),
            environment=os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000"),
            backend_url=os.getenv("BACKEND_URL", "http://localhost:4000"),
            db_path=os.getenv("DB_PATH", "banana.db"),
            jwt_secret=read_secret("JWT_SECRET", "banana-secret"),
            jwt_expiry_days=int(os.getenv("JWT_EXPIRY_DAYS", "7")),
            session_secret=read_secret("SESSION_SECRET"),
            google_client_id=read_secret("GOOGLE_CLIENT_ID"),
            google_client_secret=read_secret("GOOGLE_CLIENT_SECRET"),
            github_client_id=read_secret("GITHUB_CLIENT_ID"),
            github_client_secret=read_secret("GITHUB_CLIENT_SECRET"),
            llm_provider=os.getenv("LLM_PROVIDER", "openai").lower().strip(),
            llm_model=os.getenv("LLM_MODEL", "gpt-4-turbo-preview"),
            openai_api_key=read_secret("OPENAI_API_KEY"),
            groq_api_key=read_secret("GROQ_API_KEY"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            rate_limit=os.getenv("RATE_LIMIT", "100 per 15 minutes"),
        )


def _usable_key(key: str) -> bool:
    return bool(key) and key not in _PLACEHOLDER_KEYS


def configure_logging(settings: Settings) -> None:
    """Process-wide logging setup; call once at startup."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
