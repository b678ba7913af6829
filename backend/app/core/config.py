from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_extensions(v: Any) -> List[str]:
    """Parse allowed extensions from string or list"""
    if isinstance(v, list):
        return [ext.lower().lstrip('.') for ext in v]
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return [ext.lower().lstrip('.') for ext in json.loads(v)]
            except json.JSONDecodeError:
                pass
        return [ext.strip().lower().lstrip('.') for ext in v.split(',') if ext.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "FlashPrint"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # One-time admin bootstrap (required in production)
    ADMIN_SETUP_KEY: str = ""
    DEFAULT_ADMIN_EMAIL: str = "admin@flashprint.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # File Upload
    # ==========================================
    MAX_UPLOAD_SIZE: int = 52428800  # 50MB per file
    MAX_FILES_PER_ORDER: int = 10
    ALLOWED_EXTENSIONS_STR: str = "pdf"
    UPLOADS_PATH: str = "uploads"

    @property
    def ALLOWED_EXTENSIONS(self) -> List[str]:
        """Parse allowed extensions from comma-separated string"""
        return parse_extensions(self.ALLOWED_EXTENSIONS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # ==========================================
    # UPI Payments
    # ==========================================
    UPI_ID: str = "flashprint@upi"
    UPI_PAYEE_NAME: str = "FlashPrint Services"
    UPI_QR_BOX_SIZE: int = 10

    # ==========================================
    # Pricing defaults (INR, used until an admin saves a pricing config)
    # ==========================================
    BW_PRICE_PER_PAGE: float = 3
    COLOR_PRICE_PER_PAGE: float = 12
    BW_COST_PER_PAGE: float = 1
    COLOR_COST_PER_PAGE: float = 5

    # ==========================================
    # Daily Reports
    # ==========================================
    # Calendar days are cut at local midnight; campus runs on IST (+05:30)
    REPORT_UTC_OFFSET_MINUTES: int = 330
    REPORTS_PATH: str = "exports/daily-reports"
    REPORT_AUTOSAVE_ENABLED: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._upload_dir = Path(self.UPLOADS_PATH)
        self._reports_dir = Path(self.REPORTS_PATH)

        self._upload_dir.mkdir(exist_ok=True, parents=True)
        self._reports_dir.mkdir(exist_ok=True, parents=True)
        Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def UPLOAD_DIR(self) -> Path:
        return self._upload_dir

    @property
    def REPORTS_DIR(self) -> Path:
        return self._reports_dir

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def setup_key_valid(self, key: Optional[str]) -> bool:
        """Setup endpoints are open outside production; in production they need ADMIN_SETUP_KEY"""
        if not self.is_production:
            return True
        return bool(self.ADMIN_SETUP_KEY) and key == self.ADMIN_SETUP_KEY


settings = Settings()
