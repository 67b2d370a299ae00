"""
CLI commands for ideport.

This package contains all Click command definitions.
"""

from ideport.cli.install import (
    cleanup_cmd,
    detect_cmd,
    install_cmd,
)
from ideport.cli.profiles import profiles

__all__ = [
    'install_cmd',
    'cleanup_cmd',
    'detect_cmd',
    'profiles',
]
