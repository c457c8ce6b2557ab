from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./quotations.db"
    COMPANY_NAME: str = "Noi That Custom"
    COMPANY_EMAIL: str = "sales@example.com"
    COMPANY_PHONE: str = ""
    COMPANY_ADDRESS: str = ""

    # Money: VND has no minor unit, override for other currencies
    CURRENCY_CODE: str = "VND"
    CURRENCY_MINOR_UNITS: int = 0

    # Auth
    JWT_SECRET: str = ""  # REQUIRED in production
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_EXPIRE_DAYS: int = 30

    # Bootstrap admin, created on startup if both are set and the user is missing
    ADMIN_USERNAME: str = ""
    ADMIN_PASSWORD: str = ""

    class Config:
        env_file = ".env"


settings = Settings()
