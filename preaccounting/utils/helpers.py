"""
Helper Utilities Module.

This module provides small generic helpers shared by the pre-accounting
modules.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - validate_file_exists: Check that a path is a regular file
    - merge_dicts: Deep merge of configuration dictionaries
    - clamp_confidence: Bound a score to [0, 1]
"""

from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/analyses")
        PosixPath('outputs/analyses')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Example:
        >>> get_file_extension("facture.PDF")
        ".pdf"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def validate_file_exists(filepath: Union[str, Path]) -> bool:
    """Check if a file exists and is a regular file."""
    path = Path(filepath)
    return path.exists() and path.is_file()


def merge_dicts(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary.
        override: Dictionary with values to override.

    Returns:
        Merged dictionary.

    Example:
        >>> base = {"incoming": {"strong": ["achat"], "weak": ["reçu"]}}
        >>> override = {"incoming": {"strong": ["achats"]}}
        >>> merge_dicts(base, override)
        {"incoming": {"strong": ["achats"], "weak": ["reçu"]}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def clamp_confidence(value: float) -> float:
    """Bound a confidence score to the [0, 1] interval."""
    return max(0.0, min(1.0, float(value)))
