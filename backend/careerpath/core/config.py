import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from careerpath.core.paths import resolve_repo_path


def _env_files() -> list[str]:
    base = resolve_repo_path("backend/.env")
    env = os.getenv("CPM_ENVIRONMENT", "").strip().lower()
    files = [str(base)]
    if env and env != "development":
        files.append(str(resolve_repo_path(f"backend/.env.{env}")))
    else:
        files.append(str(resolve_repo_path("backend/.env.local")))
    return files


class Settings(BaseSettings):
    app_name: str = "Career Path Manager"
    environment: str = "development"

    database_url: str

    auth_mode: Literal["dev", "google"] = "dev"

    google_client_id: str = ""
    google_oauth_secrets_path: str = "secrets/google-oauth-client.json"
    google_workspace_domain: str = ""
    google_application_credentials: str = "secrets/google-service-account.json"
    google_clock_skew_seconds: int = 180

    enable_gmail: bool = False
    gmail_sender_email: str = ""
    gmail_sender_name: str = "Career Path Manager"
    public_app_origin: str = ""

    enforce_offer_transitions: bool = True
    auto_create_tables: bool = False

    model_config = SettingsConfigDict(env_prefix="CPM_", env_file=_env_files(), extra="ignore")


settings = Settings()
