# backend configuration
# loads env vars for mongodb, jwt verification, and check-in limits

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # mongodb
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "tranquili_db")

    # jwt verification: tokens are issued by the auth provider with a shared secret
    JWT_SECRET: str = os.getenv("JWT_SECRET", "tranquili-dev-secret-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # chat and mood limits
    CHAT_MESSAGE_MAX_LENGTH: int = 8000
    MOOD_HISTORY_LIMIT: int = 5000

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
