import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Settings:
    PROJECT_NAME: str = "SixLoans Marketplace"
    APP_ENV: str = os.getenv("APP_ENV", "production")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME")
    # When set, OTP and revoked-token state is kept in Redis instead of process memory
    REDIS_URL: str = os.getenv("REDIS_URL")

    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = _int_env("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", 7 * 24 * 60)
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:3000")

    OTP_LENGTH: int = _int_env("OTP_LENGTH", 6)
    OTP_EXPIRY_MINUTES: int = _int_env("OTP_EXPIRY_MINUTES", 10)
    SIGNUP_OTP_LENGTH: int = _int_env("SIGNUP_OTP_LENGTH", 4)
    SIGNUP_OTP_EXPIRY_MINUTES: int = _int_env("SIGNUP_OTP_EXPIRY_MINUTES", 5)
    OTP_SWEEP_INTERVAL_SECONDS: int = _int_env("OTP_SWEEP_INTERVAL_SECONDS", 300)

    EMAIL_HOST: str = os.getenv("EMAIL_HOST", "smtp.gmail.com")
    EMAIL_PORT: int = _int_env("EMAIL_PORT", 587)
    EMAIL_USER: str = os.getenv("EMAIL_USER")
    EMAIL_PASSWORD: str = os.getenv("EMAIL_PASSWORD")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM") or os.getenv("EMAIL_USER")

    SMS_API_URL: str = os.getenv("SMS_API_URL", "https://dashboard.philsms.com/api/v3/sms/send")
    SMS_API_TOKEN: str = os.getenv("SMS_API_TOKEN")
    SMS_SENDER_ID: str = os.getenv("SMS_SENDER_ID")

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"

    @property
    def cors_origins(self) -> list:
        raw = self.CLIENT_URL or ""
        return [o.strip() for o in raw.split(",") if o.strip()]


settings = Settings()

if not settings.JWT_SECRET_KEY:
    logging.getLogger(__name__).warning("JWT_SECRET_KEY is not set. Set it in .env for secure auth.")
