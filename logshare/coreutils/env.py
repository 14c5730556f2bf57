"""
Environment - .env loading and variable lookup for the CLI
"""

from typing import Optional
import os

from dotenv import find_dotenv, load_dotenv


def load_env(dotenv_path: Optional[str] = None) -> bool:
    """
    Load variables from a .env file into the process environment

    Variables already set in the environment are never overridden.

    Args:
        dotenv_path: File to load; defaults to the nearest .env found from
            the working directory upwards

    Returns:
        bool: True if at least one variable was set
    """
    return load_dotenv(dotenv_path or find_dotenv(usecwd=True), override=False)


def env_get(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable or return default; empty values count as unset."""
    return os.getenv(key) or default
