"""Shared fixtures: log capture and run settings."""

from __future__ import annotations

import logging
from typing import List

import pytest

from src.utils.config import PartitionConfig, PullParams
from src.utils.pull_logger import BASE_NAME


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def log_records():
    """Records emitted through the pull logger (which does not propagate to root)."""
    handler = _ListHandler()
    logger = logging.getLogger(BASE_NAME)
    old_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield handler.records
    logger.removeHandler(handler)
    logger.setLevel(old_level)


@pytest.fixture
def pull_params():
    return PullParams(
        characteristic_names={
            "temperature": ("Temperature", "Temperature, water"),
            "secchi": ("Depth, Secchi disk depth",),
        },
        drop_location_types=("Well",),
    )


@pytest.fixture
def partition_cfg():
    return PartitionConfig(target_pull_size=4500, target_inv_size=10)
