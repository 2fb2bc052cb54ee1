"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Database
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "clubscore.db")
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")

    # JWT settings
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Comma-separated extra origins for the web client
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Cricket defaults when a tournament or standalone match does not set them
    DEFAULT_OVERS: int = int(os.getenv("DEFAULT_OVERS", "20"))
    DEFAULT_PLAYERS_PER_SIDE: int = int(os.getenv("DEFAULT_PLAYERS_PER_SIDE", "11"))


settings = Settings()
