from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Banco de dados
    DATABASE_URL: str
    SQL_ECHO: bool = False

    # default admin created on first boot
    ADMIN_NAME: str = "Admin"
    ADMIN_EMAIL: str = "admin@quizify.com"
    ADMIN_PASSWORD: str = "admin123456"

    ENVIRONMENT: str = "development"
    CLIENT_URL: Optional[str] = None

    # uploads
    UPLOAD_DIR: str = "static/uploads"
    UPLOAD_URL_PREFIX: str = "/static/uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    class Config:
        env_file = ".env"


settings = Settings()
