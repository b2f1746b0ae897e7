"""
Configuration utility functions.

Shared helper for reading YAML/JSON configuration files and code tables.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml


def read_structured_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a ``.json``, ``.yaml`` or ``.yml`` file into a dictionary.

    I/O and parse errors propagate; callers decide how to surface them.
    """
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    return data or {}
