"""
Shared fixtures for the TongYi AI example tests.

Services are replaced with `MagicMock(spec=TongYiService)` instances, one per
qualifier, so route tests never reach the network.
"""

from __future__ import annotations

from typing import Dict, Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from ai_example.api.http_api import create_app
from ai_example.llm.client import DashScopeClient
from ai_example.services import registry
from ai_example.services.base import TongYiService


@pytest.fixture
def fake_services() -> Dict[str, MagicMock]:
    """One mock service per registered qualifier."""
    return {qualifier: MagicMock(spec=TongYiService) for qualifier in registry.SERVICE_REGISTRY}


@pytest.fixture
def api_client(fake_services: Dict[str, MagicMock]) -> Iterator[TestClient]:
    """TestClient over an app wired to the mock services."""
    with TestClient(create_app(fake_services)) as client:
        yield client


@pytest.fixture
def dashscope_client() -> MagicMock:
    """Mock transport client for service-level tests."""
    return MagicMock(spec=DashScopeClient)
