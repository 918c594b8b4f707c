"""
Utility functions for the form coach project.
"""

from .io_utils import (
    load_config,
    new_document_id,
    save_json_document,
)

__all__ = [
    'load_config',
    'new_document_id',
    'save_json_document',
]
