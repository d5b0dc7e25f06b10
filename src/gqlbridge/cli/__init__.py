"""
CLI module - command line interface and configuration.
"""

from .config import ServiceConfig, load_config
from .main import app, create_parser, main

__all__ = ["ServiceConfig", "load_config", "app", "create_parser", "main"]
