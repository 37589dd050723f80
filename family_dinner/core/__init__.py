"""
Core utilities and configuration for Family Dinner.

This package provides core functionality including settings, logging
configuration, error types and the persistence layer.
"""

from family_dinner.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
