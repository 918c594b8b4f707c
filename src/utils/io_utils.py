"""
I/O utilities for configuration files and JSON documents.
"""

import json
import logging
import os
import uuid
from typing import Dict

import yaml

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> Dict:
    """
    Loads configuration from a YAML file.

    Args:
        config_path (str): Path to the YAML configuration file.

    Returns:
        Dict: The loaded configuration.
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    return config


def new_document_id() -> str:
    """Short random identifier for stored documents."""
    return uuid.uuid4().hex[:20]


def save_json_document(directory: str, doc_id: str, payload: Dict) -> str:
    """
    Write one JSON document as ``<directory>/<doc_id>.json``.

    The file is written to a temporary name first and then renamed, so a
    crash never leaves a half-written document behind.

    Args:
        directory (str): Target directory (created if missing).
        doc_id (str): Document identifier, used as the file stem.
        payload (Dict): JSON-serializable content.

    Returns:
        str: Path of the written file.
    """
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"{doc_id}.json")
    tmp_path = path + ".tmp"
    with open(tmp_path, 'w') as f:
        json.dump(payload, f, indent=2)
    os.replace(tmp_path, path)
    logger.debug(f"Saved document: {path}")
    return path
