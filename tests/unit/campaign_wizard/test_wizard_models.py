"""
Unit Tests for Campaign Wizard Models

Tests snapshot immutability, section helpers and result values.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_wizard_service.models import (
    AudienceSection,
    BalanceCheck,
    FinishOutcome,
    FinishResult,
    LocationSection,
    MediaAttachResult,
    RadiusLocation,
    StepValidationResult,
    WizardSnapshot,
    parse_location,
)


class TestWizardSnapshot:
    """Tests for the immutable combined snapshot"""

    def test_with_section_returns_new_snapshot(self, valid_snapshot):
        # Given: a valid snapshot
        # When: changing the title
        updated = valid_snapshot.with_section("basic_info", title="Campaign Y")

        # Then: original is untouched
        assert valid_snapshot.title == "Campaign X"
        assert updated.title == "Campaign Y"
        assert updated.audience == valid_snapshot.audience

    def test_snapshot_is_frozen(self, valid_snapshot):
        with pytest.raises(ValidationError):
            valid_snapshot.basic_info = AudienceSection()

    def test_sections_are_frozen(self, valid_snapshot):
        with pytest.raises(ValidationError):
            valid_snapshot.basic_info.title = "Mutated"

    def test_value_equality(self, factory):
        assert factory.make_valid_snapshot() == factory.make_valid_snapshot()
        assert factory.make_valid_snapshot() != factory.make_valid_snapshot(title="Other")

    def test_unknown_section(self, valid_snapshot):
        with pytest.raises(ValueError):
            valid_snapshot.with_section("payment", amount=1)

    def test_unknown_field(self, valid_snapshot):
        with pytest.raises(ValueError):
            valid_snapshot.with_section("audience", title="wrong section")

    def test_builder(self, builder, factory):
        snapshot = (
            builder.with_title("Built")
            .with_budget(Decimal("250"))
            .with_location(factory.make_city_location())
            .build()
        )
        assert snapshot.title == "Built"
        assert snapshot.budget == Decimal("250")
        assert snapshot.location.kind == "city_list"

    def test_payload_keeps_entered_values(self, valid_snapshot):
        payload = valid_snapshot.to_payload()

        assert payload["basic_info"]["budget"] == "500"
        assert payload["location"]["kind"] == "radius"
        assert WizardSnapshot.from_payload(payload) == valid_snapshot

    def test_from_empty_payload(self):
        assert WizardSnapshot.from_payload(None) == WizardSnapshot()


class TestSectionHelpers:
    """Tests for section emptiness and location parsing"""

    def test_empty_section(self):
        assert AudienceSection().is_empty()
        assert AudienceSection(niche="", weekdays=[]).is_empty()

    def test_non_empty_section(self):
        assert not AudienceSection(age_min=18).is_empty()

    def test_parse_location_selects_variant(self, factory):
        spec = parse_location(factory.make_radius_location(radius_km=3.0))
        assert isinstance(spec, RadiusLocation)
        assert spec.radius_km == 3.0

    def test_parse_location_without_kind(self):
        with pytest.raises(ValidationError):
            parse_location(LocationSection(cities=["Santos"]))


class TestResultValues:
    """Tests for result helpers"""

    def test_first_error(self):
        result = StepValidationResult.failed({"age_max": ["Minimum age must be less than maximum age"]})
        assert result.first_error == "Minimum age must be less than maximum age"
        assert StepValidationResult.ok().first_error is None

    def test_shortfall(self):
        check = BalanceCheck(
            available_balance=Decimal("300"), requested_budget=Decimal("500"), sufficient=False
        )
        assert check.shortfall == Decimal("200")

    def test_finish_result_finalized(self):
        assert FinishResult(outcome=FinishOutcome.FINALIZED, campaign_id="cmp_1").finalized
        assert not FinishResult(outcome=FinishOutcome.INSUFFICIENT_BALANCE).finalized

    def test_media_attach_result(self):
        assert MediaAttachResult(url="https://cdn.example.com/a.png").success
        assert not MediaAttachResult(error="Upload failed").success
