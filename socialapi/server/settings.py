"""Application settings loaded from environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration settings.

    One settings object is shared by the auth, post and tweet apps. Each app
    only reads the values it needs (its own database URL, for instance).
    """

    # Server Configuration
    SERVICE_NAME: str = "post"  # auth | post | tweet
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Databases (one per service, no shared schema)
    AUTH_DATABASE_URL: str = "sqlite:///./auth.db"
    POST_DATABASE_URL: str = "sqlite:///./posts.db"
    TWEET_DATABASE_URL: str = "sqlite:///./tweets.db"
    DATABASE_ECHO: bool = False
    DATABASE_AUTO_CREATE: bool = True  # create tables on startup

    # JWT
    JWT_SECRET: str = "dev-only-secret-change-me-0123456789abcdef0123456789"
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "social-auth-service"
    JWT_EXPIRATION_SECONDS: int = 86400  # 24h
    JWT_REFRESH_EXPIRATION_SECONDS: int = 604800  # 7d

    # User lookup service (served by the auth app under /api/users)
    USER_SERVICE_BASE_URL: str = "http://localhost:8001"
    USER_SERVICE_CONNECT_TIMEOUT: float = 5.0
    USER_SERVICE_READ_TIMEOUT: float = 10.0
    USER_SERVICE_RETRY_INTERVAL: float = 1.0
    USER_SERVICE_RETRY_MAX_INTERVAL: float = 3.0
    USER_SERVICE_MAX_ATTEMPTS: int = 3
    USER_CACHE_TTL_SECONDS: int = 300
    USER_CACHE_MAX_SIZE: int = 1000
    USER_FETCH_MAX_WORKERS: int = 10

    # Content limits
    CONTENT_MAX_POST_LENGTH: int = 2000
    CONTENT_MAX_COMMENT_LENGTH: int = 500
    CONTENT_MAX_TWEET_LENGTH: int = 280
    CONTENT_MAX_IMAGES: int = 10
    CONTENT_ALLOWED_IMAGE_TYPES: str = "jpg,jpeg,png,gif,webp"
    CONTENT_ALLOWED_VIDEO_TYPES: str = "mp4,webm,mov"

    # Queries
    TRENDING_WINDOW_HOURS: int = 24
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
