"""Utility functions for the Appaloosa publisher."""

from appaloosa_publisher.utils.build_log import BuildListener
from appaloosa_publisher.utils.logging import configure_logging, get_logger

__all__ = [
    "BuildListener",
    "configure_logging",
    "get_logger",
]
