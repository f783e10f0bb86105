"""
Core utilities and configuration for Toolforge-AI.

This package provides core functionality including logging configuration
and environment-driven settings.
"""

from toolforge_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
