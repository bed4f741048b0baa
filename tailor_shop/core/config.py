"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "Tailor Shop Tracker API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./tailor_shop.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "720"))
    admin_name: str = getenv("ADMIN_NAME", "Administrator")
    admin_email: str = getenv("ADMIN_EMAIL", "admin@tailorshop.local")
    admin_password: str = getenv("ADMIN_PASSWORD", "admin123")
    app_timezone: str = getenv("APP_TIMEZONE", "UTC")
    currency: str = getenv("CURRENCY", "GHS")
    business_name: str = getenv("BUSINESS_NAME", "Tailor Shop")
    enable_email_notifications: bool = getenv("ENABLE_EMAIL_NOTIFICATIONS", "0") == "1"
    smtp_host: str = getenv("SMTP_HOST", "")
    smtp_port: int = int(getenv("SMTP_PORT", "587"))
    smtp_user: str = getenv("SMTP_USER", "")
    smtp_password: str = getenv("SMTP_PASSWORD", "")
    from_email: str = getenv("FROM_EMAIL", "")
    enable_sms_notifications: bool = getenv("ENABLE_SMS_NOTIFICATIONS", "0") == "1"
    twilio_account_sid: str = getenv("TWILIO_ACCOUNT_SID", "")
    twilio_auth_token: str = getenv("TWILIO_AUTH_TOKEN", "")
    twilio_phone_number: str = getenv("TWILIO_PHONE_NUMBER", "")
    cron_secret: str = getenv("CRON_SECRET", "dev-cron-secret-change-me")


settings: Settings = Settings()
