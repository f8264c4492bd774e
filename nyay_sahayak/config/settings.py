"""
Centralized Configuration for Nyay Sahayak
==========================================
All configuration values in one place, configurable via environment variables.
"""
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    elif val in ("false", "0", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    try:
        return int(os.environ.get(key, default))
    except (ValueError, TypeError):
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.environ.get(key, default))
    except (ValueError, TypeError):
        return default


def get_app_dir() -> str:
    """Get the directory that holds persistent data (logs, storage db)."""
    if os.environ.get('NYAY_SAHAYAK_APP_DIR'):
        return os.environ['NYAY_SAHAYAK_APP_DIR']
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


APP_DIR = get_app_dir()


@dataclass
class ServerConfig:
    """Flask server configuration."""
    host: str = field(default_factory=lambda: os.environ.get("NYAY_SAHAYAK_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_int_env("NYAY_SAHAYAK_PORT", 5002))
    debug: bool = field(default_factory=lambda: _get_bool_env("NYAY_SAHAYAK_DEBUG", False))
    secret_key: str = field(default_factory=lambda: os.environ.get("SECRET_KEY", "dev-key-change-in-production"))

    # CORS settings
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:5002",
    ])


@dataclass
class GeminiConfig:
    """Google GenAI configuration."""
    api_key: str = field(default_factory=lambda: os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", ""))
    text_model: str = field(default_factory=lambda: os.environ.get("GEMINI_TEXT_MODEL", "gemini-2.5-flash"))
    vision_model: str = field(default_factory=lambda: os.environ.get("GEMINI_VISION_MODEL", "gemini-2.5-flash"))
    transcription_temperature: float = field(default_factory=lambda: _get_float_env("GEMINI_TRANSCRIPTION_TEMPERATURE", 0.2))

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class BhashiniConfig:
    """Bhashini language backend configuration."""
    base_url: str = field(default_factory=lambda: os.environ.get("BHASHINI_BASE_URL", "http://localhost:5000"))

    # Timeouts
    connect_timeout: int = field(default_factory=lambda: _get_int_env("BHASHINI_CONNECT_TIMEOUT", 10))
    read_timeout: int = field(default_factory=lambda: _get_int_env("BHASHINI_READ_TIMEOUT", 60))
    health_check_timeout: int = field(default_factory=lambda: _get_int_env("BHASHINI_HEALTH_TIMEOUT", 5))
    max_retries: int = field(default_factory=lambda: _get_int_env("BHASHINI_MAX_RETRIES", 2))


@dataclass
class ChatConfig:
    """Chat and document reply configuration."""
    # Translating every partial snapshot costs one translation call per fragment
    translate_partial_replies: bool = field(default_factory=lambda: _get_bool_env("TRANSLATE_PARTIAL_REPLIES", False))
    default_source_language: str = field(default_factory=lambda: os.environ.get("DEFAULT_SOURCE_LANGUAGE", "en"))
    default_display_language: str = field(default_factory=lambda: os.environ.get("DEFAULT_DISPLAY_LANGUAGE", "en"))


@dataclass
class CacheConfig:
    """Translation cache configuration."""
    enabled: bool = field(default_factory=lambda: _get_bool_env("CACHE_ENABLED", True))
    # 0 keeps every entry for the lifetime of the session
    max_entries: int = field(default_factory=lambda: _get_int_env("CACHE_MAX_ENTRIES", 0))
    # Seconds a concurrent duplicate miss waits for the first fetch
    inflight_wait_timeout: float = field(default_factory=lambda: _get_float_env("CACHE_INFLIGHT_TIMEOUT", 60.0))


@dataclass
class FileConfig:
    """Uploaded document and audio configuration."""
    max_document_size_mb: int = field(default_factory=lambda: _get_int_env("MAX_DOCUMENT_SIZE_MB", 5))
    allowed_document_types: Tuple[str, ...] = field(
        default_factory=lambda: ("image/jpeg", "image/png", "image/webp")
    )
    max_audio_size_mb: int = field(default_factory=lambda: _get_int_env("MAX_AUDIO_SIZE_MB", 10))
    allowed_audio_types: Tuple[str, ...] = field(
        default_factory=lambda: ("audio/webm", "audio/wav", "audio/ogg", "audio/mpeg", "audio/mp4")
    )

    @property
    def max_document_size_bytes(self) -> int:
        return self.max_document_size_mb * 1024 * 1024

    @property
    def max_audio_size_bytes(self) -> int:
        return self.max_audio_size_mb * 1024 * 1024


@dataclass
class LoggingConfig:
    """Logging configuration."""
    verbose_debug: bool = field(default_factory=lambda: _get_bool_env("VERBOSE_DEBUG", True))
    log_buffer_size: int = field(default_factory=lambda: _get_int_env("LOG_BUFFER_SIZE", 500))
    log_file_max_bytes: int = field(default_factory=lambda: _get_int_env("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024))
    log_file_backup_count: int = field(default_factory=lambda: _get_int_env("LOG_FILE_BACKUP_COUNT", 5))


@dataclass
class SecurityConfig:
    """Security configuration."""
    rate_limit_per_minute: int = field(default_factory=lambda: _get_int_env("RATE_LIMIT_PER_MINUTE", 30))
    db_timeout: int = field(default_factory=lambda: _get_int_env("DB_TIMEOUT", 30))


@dataclass
class PathConfig:
    """Path configuration."""
    app_dir: str = field(default_factory=lambda: APP_DIR)

    @property
    def log_folder(self) -> Path:
        return Path(self.app_dir) / 'logs'

    @property
    def storage_db_path(self) -> str:
        return os.path.join(self.app_dir, 'client_storage.db')

    @property
    def learning_data_path(self) -> Path:
        return Path(__file__).resolve().parent.parent / 'data' / 'learn_modules.json'


@dataclass
class Config:
    """Main application configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    bhashini: BhashiniConfig = field(default_factory=BhashiniConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    file: FileConfig = field(default_factory=FileConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    paths: PathConfig = field(default_factory=PathConfig)

    def __post_init__(self):
        """Create necessary directories after initialization."""
        self._create_directories()
        self._validate()

    def _create_directories(self):
        """Create necessary directories."""
        os.makedirs(self.paths.log_folder, exist_ok=True)

    def _validate(self):
        """Validate configuration values."""
        if self.cache.max_entries < 0:
            raise ValueError("max_entries must be 0 (unbounded) or positive")
        if self.file.max_document_size_mb < 1:
            raise ValueError("max_document_size_mb must be at least 1")
        if self.security.rate_limit_per_minute < 1:
            raise ValueError("rate_limit_per_minute must be at least 1")


# Global configuration instance
config = Config()
