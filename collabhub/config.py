# collabhub/config.py
# Environment-aware configuration for the collabhub backend

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT verification (tokens are issued by the auth service)
SECRET_KEY = os.environ.get("SECRET_KEY", "your-secret-key-here")
ALGORITHM = "HS256"
ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", "60"))

# Document store
MONGODB_URL = os.environ.get("MONGODB_URL", "mongodb://localhost:27017").strip()
DATABASE_NAME = os.environ.get("DATABASE_NAME", "collabhub")

# Transactions need a replica set; standalone servers fall back to compensating writes
MONGODB_USE_TRANSACTIONS = os.environ.get("MONGODB_USE_TRANSACTIONS", "false").lower() in ("1", "true", "yes")

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

extra_origins = os.environ.get("CORS_ORIGINS", "")
if extra_origins:
    CORS_ORIGINS.extend(o.strip() for o in extra_origins.split(",") if o.strip())

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Database: {DATABASE_NAME} (transactions={'on' if MONGODB_USE_TRANSACTIONS else 'off'})")
