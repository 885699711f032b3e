#!/usr/bin/env python3
"""
GLTF Core Logging

The ``gltf_core`` logger writes to stdout; each pipeline stage logs through a
child logger (``gltf_core.glb``, ``gltf_core.parser``, ``gltf_core.validator``,
``gltf_core.buffers``, ``gltf_core.document``) so output can be filtered per
stage with the standard logging module.
"""

import logging
import sys
from typing import Union


# Create the main package logger
logger = logging.getLogger('gltf_core')
logger.setLevel(logging.INFO)

# Prevent duplicate handlers if module is imported multiple times
if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get the child logger of a pipeline stage.

    Args:
        name: Stage name (e.g., 'document', 'glb', 'validator', 'buffers')
    """
    return logging.getLogger(f'gltf_core.{name}')


def set_log_level(level: Union[int, str]):
    """
    Set the log level for the package and its console handler.

    Args:
        level: Logging level as a number (logging.DEBUG) or a name ('debug')
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
