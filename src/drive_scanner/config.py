import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


# Helper functions for parsing environment variables
def get_str_env(key: str, default: Optional[str] = "") -> Optional[str]:
    return os.environ.get(key, default)

def get_int_env(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default

def get_float_env(key: str, default: float) -> float:
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default

def get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key, str(default)).lower()
    return value in ("true", "1", "yes")


# Default factory functions
def default_first_scan_delay_ms() -> float:
    return get_float_env("SCANNER_FIRST_SCAN_DELAY_MS", 125)

def default_scan_interval_ms() -> float:
    return get_float_env("SCANNER_INTERVAL_MS", 2000)

def default_db_path() -> str:
    return get_str_env("DB_PATH", "drive_scanner.db")

def default_log_level() -> str:
    return get_str_env("LOG_LEVEL", "INFO")

def default_log_dir() -> str:
    return get_str_env("LOG_DIR", "logs")

def default_max_size_mb() -> int:
    return get_int_env("LOG_MAX_SIZE_MB", 10)

def default_backup_count() -> int:
    return get_int_env("LOG_BACKUP_COUNT", 5)

def default_use_color() -> bool:
    return get_bool_env("LOG_USE_COLOR", True)

def default_data_dir() -> str:
    return get_str_env("DATA_DIR", str(Path.home() / ".drive_scanner"))

def default_unsafe_mode() -> bool:
    return get_bool_env("UNSAFE_MODE", False)


class ScannerConfig(BaseModel):
    """Drive scanner timing configuration."""
    first_scan_delay_ms: float = Field(default_factory=default_first_scan_delay_ms)
    scan_interval_ms: float = Field(default_factory=default_scan_interval_ms)

    @property
    def first_scan_delay(self) -> float:
        """Delay before the first scan, in seconds."""
        return self.first_scan_delay_ms / 1000

    @property
    def scan_interval(self) -> float:
        """Delay between two scans, in seconds."""
        return self.scan_interval_ms / 1000


class DbConfig(BaseModel):
    """SQLite database configuration."""
    path: str = Field(default_factory=default_db_path)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default_factory=default_log_level)
    log_dir: str = Field(default_factory=default_log_dir)
    max_size_mb: int = Field(default_factory=default_max_size_mb)
    backup_count: int = Field(default_factory=default_backup_count)
    use_color: bool = Field(default_factory=default_use_color)


class AppSettings(BaseModel):
    """Application-wide settings."""
    data_dir: str = Field(default_factory=default_data_dir)
    unsafe_mode_default: bool = Field(default_factory=default_unsafe_mode)


class AppConfig(BaseModel):
    """Application configuration."""
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    db: DbConfig = Field(default_factory=DbConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    app: AppSettings = Field(default_factory=AppSettings)


# Create a singleton config instance
config = AppConfig()
