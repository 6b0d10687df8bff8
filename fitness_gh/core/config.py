import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fitness_gh.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-access-secret")
REFRESH_SECRET_KEY = os.getenv("REFRESH_SECRET_KEY", "change-me-refresh-secret")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# API
API_PREFIX = os.getenv("API_PREFIX", "/api/v1")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# Payments (simulated provider)
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "GHS")
CHECKOUT_BASE_URL = os.getenv("CHECKOUT_BASE_URL", "https://checkout.simulated-pay.com")
PAYMENT_WEBHOOK_SECRET = os.getenv("PAYMENT_WEBHOOK_SECRET")

# Email verification
OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "600"))
EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@fitness-gh.local")
