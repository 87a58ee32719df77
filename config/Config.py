# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=True)


@dataclass(frozen=True)
class Config:
    # Postgres (pgvector) row store
    database_url: str = ""

    # OpenAI (direct, for generation and optionally embeddings)
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_chat_model: str = ""
    openai_embed_model: str = ""

    # Azure OpenAI (preferred for embeddings when fully configured)
    openai_azure_api_key: str = ""
    openai_azure_endpoint: str = ""
    openai_azure_embed_deployment: str = ""
    openai_azure_api_version: str = ""

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # Store
        "database_url": "MP_DATABASE_URL",     # e.g. postgresql://user:pw@host:5432/db

        # OpenAI direct
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",  # e.g. https://api.openai.com/v1
        "openai_chat_model": "OPENAI_CHAT_MODEL",
        "openai_embed_model": "OPENAI_EMBED_MODEL",

        # Azure OpenAI
        "openai_azure_api_key": "AZURE_OPENAI_API_KEY",
        "openai_azure_endpoint": "AZURE_OPENAI_ENDPOINT",
        "openai_azure_embed_deployment": "AZURE_OPENAI_EMBED_DEPLOYMENT",
        "openai_azure_api_version": "AZURE_OPENAI_API_VERSION",
    }

    # Convenient *groups* for use in tests / health checks
    AZURE_OPENAI_ENV_VARS = (
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_EMBED_DEPLOYMENT",
    )

    OPENAI_DIRECT_ENV_VARS = (
        "OPENAI_API_KEY",
    )

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables."""
        kwargs = {
            field_name: (os.getenv(env_name) or "").strip()
            for field_name, env_name in Config.ENV_VARS.items()
        }
        return Config(**kwargs)

    @property
    def azure_embeddings_configured(self) -> bool:
        return bool(
            self.openai_azure_api_key
            and self.openai_azure_endpoint
            and self.openai_azure_embed_deployment
        )

    @property
    def embeddings_configured(self) -> bool:
        return self.azure_embeddings_configured or bool(self.openai_api_key)

    @property
    def chat_configured(self) -> bool:
        return bool(self.openai_api_key)

    def validate(self, *fields: str) -> None:
        """
        Raise if any of the named fields is empty.

        AI credentials are optional (the engine degrades without them), so
        strictness is opt-in per context, e.g. cfg.validate("database_url").
        """
        names = fields or tuple(self.ENV_VARS.keys())
        missing_fields = [f for f in names if not getattr(self, f, "")]

        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "database_configured": bool(self.database_url),
            "openai_base_url": self.openai_base_url,
            "openai_chat_model": self.openai_chat_model,
            "openai_embed_model": self.openai_embed_model,
            "openai_azure_endpoint": self.openai_azure_endpoint,
            "openai_azure_embed_deployment": self.openai_azure_embed_deployment,
            "embeddings_configured": self.embeddings_configured,
            "chat_configured": self.chat_configured,
        }
