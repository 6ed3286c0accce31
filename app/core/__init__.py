"""
Core module for application infrastructure.
"""
from app.core.config import Settings
from app.core.logging_config import setup_logging

__all__ = [
    "Settings",
    "setup_logging",
]
