"""
Nyay Sahayak - Configuration Module
"""
from nyay_sahayak.config.settings import Config, config
from nyay_sahayak.config.constants import (
    APP_NAME,
    SUPPORTED_LANGUAGES,
    Sender,
    LogLevel
)

__all__ = [
    "Config",
    "config",
    "APP_NAME",
    "SUPPORTED_LANGUAGES",
    "Sender",
    "LogLevel"
]
