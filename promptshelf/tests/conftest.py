"""
Test configuration utilities.

Ensures the project root is available on ``sys.path`` so imports such as
``promptshelf.server`` resolve correctly during pytest collection, and keeps
browser profile storage in memory for every test.
"""

from __future__ import annotations

import os
import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# must be set before promptshelf.server is imported
os.environ.setdefault("PROMPTSHELF_STORAGE", "memory")

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_gateway():
    """PromptGateway stand-in whose coroutines are AsyncMocks."""
    gateway = MagicMock()
    gateway.list_prompts = AsyncMock(return_value=[])
    gateway.retrieve = AsyncMock()
    gateway.retrieve_many = AsyncMock(return_value=[])
    gateway.create = AsyncMock(return_value="new-id")
    gateway.update_metadata = AsyncMock(return_value=None)
    gateway.delete = AsyncMock(return_value=None)
    gateway.list_categories = AsyncMock(return_value=[])
    return gateway
