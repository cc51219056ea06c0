"""
Configuración de la aplicación cargada desde variables de entorno (soporta .env)
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return (
        f"postgresql://{os.getenv('DB_USER')}:{os.getenv('DB_PASSWORD')}"
        f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}/{os.getenv('DB_NAME')}"
    )


# Base de datos
DATABASE_URL = _build_database_url()

# Seguridad
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# Operación del hotel
HOTEL_TIMEZONE = os.getenv("HOTEL_TIMEZONE", "Asia/Manila")
DEFAULT_MAX_BRANCHES = int(os.getenv("DEFAULT_MAX_BRANCHES", "5"))
DEFAULT_MAX_USERS = int(os.getenv("DEFAULT_MAX_USERS", "20"))

# HTTP
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",") if o.strip()]
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
RATE_LIMIT_LOGIN = os.getenv("RATE_LIMIT_LOGIN", "10/minute")
REDIS_URL = os.getenv("REDIS_URL", "memory://")

# Logging
LOG_FILE = os.getenv("LOG_FILE", "hotel_logs.txt")
