import os
from pathlib import Path
from typing import List

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Movie Ticket Booking'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    LOG_DIR: str = str(_PROJECT_ROOT / 'logs')
    FRONTEND_URL: str = 'http://localhost:5173'

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'movie_ticket_booking'

    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    # Kafka
    KAFKA_BOOTSTRAP_SERVERS: str = 'localhost:9092'
    KAFKA_GROUP_ID: str = 'movie-ticket-booking'
    KAFKA_CONSUMER_AUTO_OFFSET_RESET: str = 'earliest'
    KAFKA_CONSUMER_ENABLED: bool = True
    KAFKA_CONSUMER_INSTANCE_ID: str = os.getenv(
        'KAFKA_CONSUMER_INSTANCE_ID', f'consumer-{os.getpid()}'
    )

    # SMTP relay (Brevo by default)
    SMTP_HOST: str = 'smtp-relay.brevo.com'
    SMTP_PORT: int = 587
    SMTP_USER: str = ''
    SMTP_PASS: SecretStr = SecretStr('')
    SENDER_EMAIL: str = 'no-reply@example.com'

    # Clerk (identity provider)
    CLERK_SECRET_KEY: SecretStr = SecretStr('')
    CLERK_API_URL: str = 'https://api.clerk.com/v1'
    CLERK_JWKS_URL: str = ''
    CLERK_AUTHORIZED_PARTIES: List[str] = []
    CLERK_HTTP_TIMEOUT_SECONDS: float = 10.0

    @field_validator('CLERK_AUTHORIZED_PARTIES', mode='before')
    @classmethod
    def assemble_authorized_parties(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Booking workflow
    PAYMENT_WINDOW_MINUTES: int = 10
    REMINDER_INTERVAL_HOURS: int = 8
    REMINDER_WINDOW_MINUTES: int = 10

    # Durable run runtime
    WORKFLOW_ENABLED: bool = True
    WORKFLOW_POLL_INTERVAL_SECONDS: float = 5.0
    WORKFLOW_POLL_BATCH_SIZE: int = 20
    WORKFLOW_LEASE_SECONDS: int = 300
    WORKFLOW_MAX_ATTEMPTS: int = 4
    WORKFLOW_RETRY_BACKOFF_SECONDS: float = 10.0


settings = Settings()  # type: ignore
