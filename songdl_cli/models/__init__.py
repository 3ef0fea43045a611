"""
Data Models Layer.

This package contains the models that define the core data structures
used throughout the application, such as configuration and statistics.
"""

from .config import ClientConfig, load_config
from .stats import SessionStats

__all__ = ["ClientConfig", "SessionStats", "load_config"]
