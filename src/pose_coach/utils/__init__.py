"""
Utility functions for the pose_coach validator.
"""

from .io_utils import (
    load_config,
    list_yaml_files,
    load_frames,
    save_json,
)

__all__ = [
    'load_config',
    'list_yaml_files',
    'load_frames',
    'save_json',
]
