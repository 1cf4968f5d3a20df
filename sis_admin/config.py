from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./sis_admin.db"
    SECRET_KEY: str = "dev-secret-sis-admin"
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "authToken"
    SESSION_HOURS: int = 8
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    APP_URL: str = "https://academy.cisco.com"
    LOGIN_RATE_LIMIT: str = "10/minute"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
