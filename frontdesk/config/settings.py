"""
Application settings and configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Application
    APP_NAME = os.getenv("APP_NAME", "Lodge Front Desk")
    VERSION = "1.0.0"
    DEBUG = os.getenv("DEBUG", "True") == "True"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Bearer tokens are issued by the external identity provider
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")

    # CORS
    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            "ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
        ).split(",")
        if origin.strip()
    ]

    # Lodge details printed on compliance documents
    LODGE_NAME = os.getenv("LODGE_NAME", "SAI GRAND LODGE")
    LODGE_ADDRESS = os.getenv("LODGE_ADDRESS", "Surendrapuri, Yadagirigutta")
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")

    # File Uploads
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
    ID_PROOF_DIR = os.getenv("ID_PROOF_DIR", os.path.join(UPLOAD_DIR, "id-proofs"))
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    SIGNED_URL_EXPIRE_SECONDS = int(os.getenv("SIGNED_URL_EXPIRE_SECONDS", "3600"))
    MAX_ID_IMAGE_BYTES = 5 * 1024 * 1024

    # Booking workflow
    GUEST_LOOKUP_CACHE_SECONDS = int(os.getenv("GUEST_LOOKUP_CACHE_SECONDS", "30"))
    SUBMIT_PROGRESS_THRESHOLD = 85
    UPCOMING_DEPARTURE_HOURS = 2

    # Pagination
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 500

settings = Settings()
