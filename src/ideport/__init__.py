"""
ideport:
    Install canonical agileflow commands and agents into AI coding IDEs.
"""

__version__ = "0.1.0"
