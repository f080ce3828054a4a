"""
Component Test Layer Configuration

Collaborators (draft store, wallet, media, campaign service) are replaced
by in-memory mocks defined per domain.

Usage:
    pytest tests/component -v
    pytest tests/component/campaign_wizard -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )
