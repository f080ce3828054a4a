"""
Campaign Wizard Data Models

Defines the combined wizard snapshot (partial per-step sections), the
location tagged union, drafts and the derived/result values exchanged
with callers.

Partial sections accept anything a user may have typed so far; the strict
per-step rules live in step_schemas.py.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


# ====================
# Enums
# ====================


class DraftStatus(str, Enum):
    """Draft lifecycle status"""
    DRAFT = "draft"
    FINALIZED = "finalized"


class StepId(str, Enum):
    """Wizard steps, in wizard order"""
    BASIC_INFO = "basic_info"
    LOCATION = "location"
    AUDIENCE = "audience"
    OBJECTIVES = "objectives"
    CREATIVES = "creatives"


class LocationKind(str, Enum):
    """Location specification variants"""
    RADIUS = "radius"
    POLYGON = "polygon"
    CITY_LIST = "city_list"
    STATE_LIST = "state_list"


class PrimaryObjective(str, Enum):
    """Main campaign objective"""
    AWARENESS = "awareness"
    CONSIDERATION = "consideration"
    CONVERSION = "conversion"
    RETENTION = "retention"
    ENGAGEMENT = "engagement"


class BiddingStrategy(str, Enum):
    """Bidding strategy"""
    CPC = "cpc"
    CPM = "cpm"
    CPA = "cpa"
    CPL = "cpl"


class NavigationMode(str, Enum):
    """Step navigation policy"""
    LINEAR = "linear"
    FREE = "free"


class WizardState(str, Enum):
    """Wizard session state"""
    EDITING = "editing"
    FINISHING = "finishing"
    FINALIZED = "finalized"  # Terminal state


class FinishOutcome(str, Enum):
    """Result of a finish attempt"""
    FINALIZED = "finalized"
    STEP_INVALID = "step_invalid"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    BALANCE_UNAVAILABLE = "balance_unavailable"
    FINALIZE_FAILED = "finalize_failed"


# ====================
# Base Models
# ====================


class BaseContract(BaseModel):
    """Base model for all wizard models"""

    model_config = ConfigDict(from_attributes=True)


class SectionBase(BaseContract):
    """Base for partial step sections; every field is optional"""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    def is_empty(self) -> bool:
        """True when nothing has been entered in the section"""
        for value in self.model_dump(exclude_none=True).values():
            if value in ("", [], {}):
                continue
            return False
        return True


# ====================
# Partial Step Sections
# ====================


class BasicInfoSection(SectionBase):
    """Basic info: title, description, budget, schedule"""
    title: Optional[str] = None
    description: Optional[str] = None
    budget: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    display_start: Optional[time] = Field(None, description="Daily display window start")
    display_end: Optional[time] = Field(None, description="Daily display window end")


class LocationSection(SectionBase):
    """
    Raw location form values.

    Fields of variants other than ``kind`` may hold stale values; they are
    dropped when the section is parsed into a LocationSpec.
    """
    kind: Optional[str] = None
    center_latitude: Optional[float] = None
    center_longitude: Optional[float] = None
    radius_km: Optional[float] = None
    polygon: Optional[List[Tuple[float, float]]] = None
    cities: Optional[List[str]] = None
    states: Optional[List[str]] = None


class AudienceSection(SectionBase):
    """Audience segmentation, niche and weekly schedule"""
    niche: Optional[str] = None
    categories: Optional[List[str]] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    genders: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    weekdays: Optional[List[int]] = Field(None, description="0=Sunday .. 6=Saturday")


class KpiTargets(BaseContract):
    """KPI goals"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    views: Optional[int] = None
    clicks: Optional[int] = None
    conversions: Optional[int] = None
    ctr: Optional[float] = Field(None, description="Click-through rate, percent")
    cpc: Optional[Decimal] = None
    roi: Optional[float] = None


class ObjectivesSection(SectionBase):
    """Objectives, KPI targets and bidding strategy"""
    primary_objective: Optional[str] = None
    secondary_objectives: Optional[List[str]] = None
    kpis: Optional[KpiTargets] = None
    strategy: Optional[str] = None


class CreativesSection(SectionBase):
    """Creative assets"""
    media_urls: Optional[List[str]] = None
    destination_url: Optional[str] = None


SECTION_MODELS = {
    StepId.BASIC_INFO.value: BasicInfoSection,
    StepId.LOCATION.value: LocationSection,
    StepId.AUDIENCE.value: AudienceSection,
    StepId.OBJECTIVES.value: ObjectivesSection,
    StepId.CREATIVES.value: CreativesSection,
}


class WizardSnapshot(BaseContract):
    """
    Immutable combined state of every wizard step.

    Each edit produces a new snapshot via ``with_section``; snapshots are
    compared by value.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    basic_info: BasicInfoSection = Field(default_factory=BasicInfoSection)
    location: LocationSection = Field(default_factory=LocationSection)
    audience: AudienceSection = Field(default_factory=AudienceSection)
    objectives: ObjectivesSection = Field(default_factory=ObjectivesSection)
    creatives: CreativesSection = Field(default_factory=CreativesSection)

    @property
    def title(self) -> Optional[str]:
        return self.basic_info.title

    @property
    def budget(self) -> Optional[Decimal]:
        return self.basic_info.budget

    def section(self, name: str) -> SectionBase:
        """Get a section by step id"""
        if name not in SECTION_MODELS:
            raise ValueError(f"Unknown wizard section: {name}")
        return getattr(self, name)

    def with_section(self, name: str, **changes: Any) -> "WizardSnapshot":
        """Return a new snapshot with the given section fields changed"""
        current = self.section(name)
        section_model = SECTION_MODELS[name]
        unknown = set(changes) - set(section_model.model_fields)
        if unknown:
            raise ValueError(f"Unknown fields for section {name}: {sorted(unknown)}")
        updated = section_model.model_validate({**current.model_dump(), **changes})
        return self.model_copy(update={name: updated})

    def to_payload(self) -> Dict[str, Any]:
        """JSON-compatible dict of the entered values"""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "WizardSnapshot":
        return cls.model_validate(payload or {})


# ====================
# Location Tagged Union
# ====================


class _LocationVariant(BaseModel):
    # Foreign-variant fields in the raw section are ignored
    model_config = ConfigDict(frozen=True, extra="ignore")


class RadiusLocation(_LocationVariant):
    """Circle around a center point"""
    kind: Literal["radius"] = "radius"
    center_latitude: float = Field(..., ge=-90, le=90)
    center_longitude: float = Field(..., ge=-180, le=180)
    radius_km: float = Field(..., ge=0.5, le=50)


class PolygonLocation(_LocationVariant):
    """Ordered (latitude, longitude) vertices"""
    kind: Literal["polygon"] = "polygon"
    polygon: List[Tuple[float, float]] = Field(..., min_length=3)


class CityListLocation(_LocationVariant):
    """Named cities"""
    kind: Literal["city_list"] = "city_list"
    cities: List[str] = Field(..., min_length=1)

    @field_validator("cities")
    @classmethod
    def _cities_not_blank(cls, v: List[str]) -> List[str]:
        cleaned = [c.strip() for c in v if c and c.strip()]
        if not cleaned:
            raise ValueError("At least one city is required")
        return cleaned


class StateListLocation(_LocationVariant):
    """Named states"""
    kind: Literal["state_list"] = "state_list"
    states: List[str] = Field(..., min_length=1)

    @field_validator("states")
    @classmethod
    def _states_not_blank(cls, v: List[str]) -> List[str]:
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("At least one state is required")
        return cleaned


LocationSpec = Annotated[
    Union[RadiusLocation, PolygonLocation, CityListLocation, StateListLocation],
    Field(discriminator="kind"),
]

_LOCATION_ADAPTER = TypeAdapter(LocationSpec)


def parse_location(section: LocationSection) -> LocationSpec:
    """
    Parse a raw location section into its tagged variant.

    Raises:
        pydantic.ValidationError: when the tag is missing/unknown or the
            selected variant's own fields are invalid
    """
    return _LOCATION_ADAPTER.validate_python(section.model_dump(exclude_none=True))


# ====================
# Derived Values
# ====================


class CoverageEstimate(BaseContract):
    """Audience-size/impression/cost approximation; never persisted"""
    area_km2: Optional[float] = None
    estimated_reach: Optional[int] = None
    estimated_impressions: Optional[int] = None
    estimated_cpm: Optional[float] = None
    description: Optional[str] = None

    @property
    def has_estimate(self) -> bool:
        return bool(self.area_km2)

    @classmethod
    def empty(cls, description: Optional[str] = None) -> "CoverageEstimate":
        return cls(description=description)


class BalanceCheck(BaseContract):
    """Requested budget versus available balance"""
    available_balance: Decimal
    requested_budget: Decimal
    sufficient: bool

    @property
    def shortfall(self) -> Decimal:
        return max(Decimal("0"), self.requested_budget - self.available_balance)


# ====================
# Drafts
# ====================


class CampaignDraft(BaseContract):
    """Persisted, resumable campaign configuration"""
    draft_id: Optional[str] = None
    owner_id: str
    status: DraftStatus = DraftStatus.DRAFT
    data: WizardSnapshot = Field(default_factory=WizardSnapshot)
    campaign_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MediaFile(BaseContract):
    """File handed to the media uploader"""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


# ====================
# Results
# ====================


class StepValidationResult(BaseContract):
    """Outcome of validating one step"""
    valid: bool
    errors: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def first_error(self) -> Optional[str]:
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None

    @classmethod
    def ok(cls) -> "StepValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, errors: Dict[str, List[str]]) -> "StepValidationResult":
        return cls(valid=False, errors=errors)


class NavigationResult(BaseContract):
    """Outcome of next/back/go_to"""
    moved: bool
    step_index: int
    errors: Dict[str, List[str]] = Field(default_factory=dict)


class FinishResult(BaseContract):
    """Outcome of a finish attempt"""
    outcome: FinishOutcome
    failed_step: Optional[StepId] = None
    failed_step_index: Optional[int] = None
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    balance_check: Optional[BalanceCheck] = None
    campaign_id: Optional[str] = None
    message: Optional[str] = None
    can_save_draft: bool = False

    @property
    def finalized(self) -> bool:
        return self.outcome == FinishOutcome.FINALIZED


class MediaAttachResult(BaseContract):
    """Outcome of uploading a creative asset"""
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.url is not None


class AutosaveStatus(BaseContract):
    """Observable autosave status (presentation only)"""
    is_saving: bool = False
    last_saved_at: Optional[datetime] = None
    last_error: Optional[str] = None
    draft_id: Optional[str] = None


# ====================
# Budget Advice
# ====================


class BudgetSuggestion(BaseContract):
    """Budget tiers for a coverage area, objective and duration"""
    minimum: Decimal
    recommended: Decimal
    optimized: Decimal
    reason: str


class RoiSimulation(BaseContract):
    """Projected return of an investment"""
    investment: Decimal
    estimated_reach: int
    estimated_impressions: int
    estimated_conversions: int
    estimated_revenue: Decimal
    roi: Decimal
    roi_percent: float


class BudgetAdequacy(BaseContract):
    """Budget versus the minimum suggested for an area"""
    sufficient: bool
    minimum: Decimal
    difference: Decimal
    message: str


class BudgetOptimization(BaseContract):
    """Budget lowered until the ROI target is met or attempts run out"""
    optimized_budget: Decimal
    reason: str
    simulation: RoiSimulation


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = [
    # Enums
    "DraftStatus",
    "StepId",
    "LocationKind",
    "PrimaryObjective",
    "BiddingStrategy",
    "NavigationMode",
    "WizardState",
    "FinishOutcome",
    # Sections
    "BasicInfoSection",
    "LocationSection",
    "AudienceSection",
    "KpiTargets",
    "ObjectivesSection",
    "CreativesSection",
    "SECTION_MODELS",
    "WizardSnapshot",
    # Location
    "RadiusLocation",
    "PolygonLocation",
    "CityListLocation",
    "StateListLocation",
    "LocationSpec",
    "parse_location",
    # Derived
    "CoverageEstimate",
    "BalanceCheck",
    # Drafts
    "CampaignDraft",
    "MediaFile",
    # Results
    "StepValidationResult",
    "NavigationResult",
    "FinishResult",
    "MediaAttachResult",
    "AutosaveStatus",
    # Budget advice
    "BudgetSuggestion",
    "RoiSimulation",
    "BudgetAdequacy",
    "BudgetOptimization",
    "utcnow",
]
