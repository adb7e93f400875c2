"""
Application settings
"""

from pydantic_settings import BaseSettings
from pathlib import Path
from dotenv import load_dotenv


"""env loading order
1) OS environment variables
2) .env at the repository root
"""

# Preload .env without overriding the OS environment
_here = Path(__file__).resolve()
_repo_root_env = _here.parents[2] / ".env"
if _repo_root_env.exists():
    load_dotenv(dotenv_path=str(_repo_root_env), override=False)


DEFAULT_JWT_SECRET = "your-super-secret-jwt-key-change-this-in-production"


class Settings(BaseSettings):
    """Application settings"""
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite+aiosqlite:///./data/lorehub.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Identity provider tokens (Supabase-compatible HS256 JWTs)
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = "authenticated"

    # Write throttling
    RATE_LIMIT_ENABLED: bool = True
    COMMENTS_PER_MINUTE: int = 10
    VOTES_PER_MINUTE: int = 30

    FRONTEND_BASE_URL: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'

settings = Settings()


def validate_settings():
    """Validate settings for the current environment"""
    if settings.ENVIRONMENT == "production":
        if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be changed in production.")
        if settings.DATABASE_URL.startswith("sqlite"):
            raise ValueError("SQLite is not supported in production; set DATABASE_URL.")

    return True


validate_settings()
