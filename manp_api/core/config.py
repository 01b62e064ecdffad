from typing import List, Optional, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "MANP Monitoring"
    # "development" opens the Drive consent URL at startup when no token is stored
    ENVIRONMENT: str = "development"

    CORS_ORIGINS: List[str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            v = v.strip("[").strip("]").strip('"').strip("'")
            if not v:
                return []
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Database - any SQLAlchemy async URL (sqlite+aiosqlite, postgresql+asyncpg)
    DATABASE_URL: str = "sqlite+aiosqlite:///./manp_reports.db"
    DATABASE_AUTH_TOKEN: Optional[str] = None

    # Google OAuth client
    CLIENT_ID: str = ""
    CLIENT_SECRET: str = ""
    REDIRECT_URI: str = "http://localhost:3000/oauth2callback"
    TOKEN_PATH: str = "drive_token.json"

    # Google Drive
    DRIVE_ROOT_FOLDER_ID: str = "root"
    DRIVE_UPLOAD_ENABLED: bool = True
    DRIVE_SHARE_PUBLIC: bool = True

    # Local staging copy of every uploaded file
    UPLOAD_DIR: str = "uploads"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def open_auth_url_on_startup(self) -> bool:
        return self.ENVIRONMENT == "development"

settings = Settings()
