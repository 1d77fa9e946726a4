"""
I/O utilities for loading YAML configuration and JSON frame recordings.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Union

import yaml

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_config(config_path: PathLike) -> Dict:
    """
    Loads a configuration mapping from a YAML file.

    Args:
        config_path (str | Path): Path to the YAML file.

    Returns:
        Dict: The loaded mapping (empty for an empty file).

    Raises:
        ValueError: If the top level of the document is not a mapping.
    """
    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(
            f"{config_path}: expected a mapping at the top level, "
            f"got {type(config).__name__}."
        )
    return config


def list_yaml_files(path: PathLike) -> List[Path]:
    """Return ``path`` itself if it is a file, else its sorted ``*.yaml``/``*.yml`` files."""
    path = Path(path)
    if path.is_file():
        return [path]
    if not path.is_dir():
        raise FileNotFoundError(f"No exercise data found at {path}.")
    files = sorted(p for p in path.iterdir() if p.suffix in ('.yaml', '.yml'))
    logger.debug("Found %d YAML files in %s", len(files), path)
    return files


def load_frames(frames_path: PathLike) -> List[Dict]:
    """
    Loads a recorded keypoint sequence from JSON.

    The file holds either a list of frames or ``{"frames": [...]}``; each
    frame maps a joint name to ``{"x", "y", "score"}``.
    """
    with open(frames_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('frames', [])
    if not isinstance(data, list):
        raise ValueError(f"{frames_path}: expected a list of frames.")
    return data


def save_json(data: Dict, out_path: PathLike) -> None:
    """Write ``data`` as indented JSON, creating parent folders."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
    logger.info("Saved %s", out_path)
