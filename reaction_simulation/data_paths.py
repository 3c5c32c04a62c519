"""
Package data path utilities.

This module provides functions to access package-bundled data files
(material definitions, detector setups, angular distributions and
efficiency tables) regardless of where the package is installed.

Example usage:
    from reaction_simulation.data_paths import get_material_file, get_detector_file

    cd2 = get_material_file("cd2")
    wall = get_detector_file("bar_wall.det")
"""

from __future__ import annotations

from pathlib import Path

from . import config


def get_data_dir() -> Path:
    """Get the path to the package data directory.

    Returns
    -------
    Path
        Path to reaction_simulation/data/
    """
    return config.DATA_DIR


def get_material_dir() -> Path:
    return config.MATERIAL_DIR


def get_detector_dir() -> Path:
    return config.DETECTOR_DIR


def get_angular_dir() -> Path:
    return config.ANGULAR_DIR


def get_efficiency_dir() -> Path:
    return config.EFFICIENCY_DIR


def _find_file(directory: Path, name: str, extension: str) -> Path:
    if not name.lower().endswith(extension):
        name = f"{name}{extension}"
    file_path = directory / name
    if not file_path.exists():
        # Try case-insensitive search
        for f in directory.glob(f"*{extension}"):
            if f.name.lower() == name.lower():
                return f
        raise FileNotFoundError(
            f"Data file '{name}' not found at {file_path}. "
            f"Available files: {sorted(p.name for p in directory.glob(f'*{extension}'))}"
        )
    return file_path


def get_material_file(name: str) -> Path:
    """Get the path to a bundled material file.

    Parameters
    ----------
    name : str
        Material file name (with or without .mat extension)

    Raises
    ------
    FileNotFoundError
        If the material file does not exist.
    """
    return _find_file(get_material_dir(), name, ".mat")


def get_detector_file(name: str) -> Path:
    """Get the path to a bundled detector setup file (.det)."""
    return _find_file(get_detector_dir(), name, ".det")


def get_angular_file(name: str) -> Path:
    """Get the path to a bundled differential cross-section file (.dat)."""
    return _find_file(get_angular_dir(), name, ".dat")


def get_efficiency_file(name: str) -> Path:
    """Get the path to a bundled efficiency table (.dat)."""
    return _find_file(get_efficiency_dir(), name, ".dat")


def list_material_files() -> list[Path]:
    """List all bundled material files."""
    return sorted(get_material_dir().glob('*.mat'))


def list_detector_files() -> list[Path]:
    """List all bundled detector setup files."""
    return sorted(get_detector_dir().glob('*.det'))
