"""
Unit Test Fixtures for Campaign Wizard Service

Uses WizardTestDataFactory from the data contract.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.campaign_wizard.data_contract import (
    TODAY,
    WizardTestDataFactory,
    WizardSnapshotBuilder,
)


@pytest.fixture
def factory():
    """Provide test data factory"""
    return WizardTestDataFactory()


@pytest.fixture
def builder():
    """Provide a fresh snapshot builder"""
    return WizardSnapshotBuilder()


@pytest.fixture
def context(factory):
    """Validation context pinned to the contract's TODAY, no budget"""
    return factory.make_context()


@pytest.fixture
def valid_snapshot(factory):
    """Snapshot that passes every step"""
    return factory.make_valid_snapshot()
