import os
from dotenv import load_dotenv

load_dotenv()

# =====================================================
# ENV
# =====================================================
ENV = os.getenv("ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =====================================================
# COMMERCE API (UPSTREAM)
# =====================================================
COMMERCE_API_BASE_URL = os.getenv("COMMERCE_API_BASE_URL", "http://localhost:8080")
COMMERCE_API_TIMEOUT_SECONDS = float(os.getenv("COMMERCE_API_TIMEOUT_SECONDS", 15))

# =====================================================
# JWT
# =====================================================
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# =====================================================
# SHIPMENT RECORDS
# =====================================================
SHIPMENT_CACHE_TTL_SECONDS = int(os.getenv("SHIPMENT_CACHE_TTL_SECONDS", 300))
SHIPMENT_CACHE_SWEEP_SECONDS = int(os.getenv("SHIPMENT_CACHE_SWEEP_SECONDS", 60))

# =====================================================
# ORDER LIST
# =====================================================
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 5))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 100))

# =====================================================
# CORS
# =====================================================
CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")


def validate_production_env() -> None:
    if (ENV or "").lower() != "production":
        return

    required = {
        "COMMERCE_API_BASE_URL": os.getenv("COMMERCE_API_BASE_URL"),
        "JWT_SECRET": JWT_SECRET,
    }

    invalid = []
    for key, value in required.items():
        val = (value or "").strip()
        if not val or val.startswith("CHANGE_THIS"):
            invalid.append(key)

    if invalid:
        raise RuntimeError(f"Production env misconfigured. Invalid keys: {', '.join(sorted(invalid))}")
