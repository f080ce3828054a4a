"""
Wizard Step Schemas

One stateless validation contract per wizard step: field constraints
(pydantic models) plus cross-field refinements. A schema never looks at
wizard position; values from other steps that a rule needs (the budget
for KPI plausibility, today's date) arrive through ValidationContext.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import (
    Annotated,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
)

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError, field_validator

from .models import (
    BiddingStrategy,
    LocationKind,
    PrimaryObjective,
    SectionBase,
    StepId,
    StepValidationResult,
    WizardSnapshot,
    parse_location,
)

logger = logging.getLogger(__name__)

ErrorMap = Dict[str, List[str]]

MIN_DRAFT_TITLE_LENGTH = 3


@dataclass(frozen=True)
class ValidationContext:
    """Explicit inputs a step rule may depend on"""
    today: date
    budget: Optional[Decimal] = None

    @classmethod
    def from_snapshot(
        cls, snapshot: WizardSnapshot, today: Optional[date] = None
    ) -> "ValidationContext":
        return cls(today=today or date.today(), budget=snapshot.budget)


def meets_draft_precondition(
    snapshot: WizardSnapshot, min_title_length: int = MIN_DRAFT_TITLE_LENGTH
) -> bool:
    """A draft may be persisted once its title has at least 3 characters"""
    title = snapshot.title
    return bool(title) and len(title.strip()) >= min_title_length


def _add_error(errors: ErrorMap, field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


# ====================
# Strict Step Models
# ====================


class _StepModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class BasicInfoStep(_StepModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10)
    budget: Decimal = Field(..., ge=100)
    start_date: date
    end_date: date
    display_start: Optional[time] = None
    display_end: Optional[time] = None


class AudienceStep(_StepModel):
    niche: str = Field(..., min_length=1)
    categories: List[str] = Field(default_factory=list)
    age_min: int = Field(..., ge=13, le=100)
    age_max: int = Field(..., ge=13, le=100)
    genders: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    weekdays: List[Annotated[int, Field(ge=0, le=6)]] = Field(..., min_length=1)


class KpiTargetsStep(_StepModel):
    views: Optional[int] = Field(None, ge=0)
    clicks: Optional[int] = Field(None, ge=0)
    conversions: Optional[int] = Field(None, ge=0)
    ctr: Optional[float] = Field(None, ge=0, le=100)
    cpc: Optional[Decimal] = Field(None, ge=0)
    roi: Optional[float] = None


class ObjectivesStep(_StepModel):
    primary_objective: PrimaryObjective
    secondary_objectives: List[str] = Field(default_factory=list)
    kpis: Optional[KpiTargetsStep] = None
    strategy: BiddingStrategy


class CreativesStep(_StepModel):
    media_urls: List[str] = Field(..., min_length=1)
    destination_url: Optional[HttpUrl] = None

    @field_validator("media_urls")
    @classmethod
    def _urls_not_blank(cls, v: List[str]) -> List[str]:
        if any(not url for url in v):
            raise ValueError("Media URLs cannot be empty")
        return v


# ====================
# Step Schemas
# ====================


class StepSchema:
    """Validation contract for one wizard step"""

    step_id: StepId
    title: str
    model: Optional[Type[BaseModel]] = None

    def parse(self, section: SectionBase) -> Any:
        return self.model.model_validate(section.model_dump(exclude_none=True))

    def refine(self, parsed: Any, context: ValidationContext) -> ErrorMap:
        """Cross-field rules, run only once field constraints pass"""
        return {}

    def error_key(self, loc: Tuple[Any, ...]) -> str:
        return ".".join(str(part) for part in loc) or self.step_id.value

    def validate(self, section: SectionBase, context: ValidationContext) -> StepValidationResult:
        try:
            parsed = self.parse(section)
        except ValidationError as e:
            errors: ErrorMap = {}
            for err in e.errors():
                _add_error(errors, self.error_key(tuple(err["loc"])), err["msg"])
            return StepValidationResult.failed(errors)

        errors = self.refine(parsed, context)
        if errors:
            return StepValidationResult.failed(errors)
        return StepValidationResult.ok()

    def validate_snapshot(
        self, snapshot: WizardSnapshot, context: ValidationContext
    ) -> StepValidationResult:
        return self.validate(snapshot.section(self.step_id.value), context)


class BasicInfoSchema(StepSchema):
    step_id = StepId.BASIC_INFO
    title = "Basic information"
    model = BasicInfoStep

    def refine(self, parsed: BasicInfoStep, context: ValidationContext) -> ErrorMap:
        errors: ErrorMap = {}
        if parsed.start_date < context.today:
            _add_error(errors, "start_date", "Start date must be today or later")
        if parsed.end_date <= parsed.start_date:
            _add_error(errors, "end_date", "End date must be after the start date")
        if parsed.display_start and parsed.display_end and parsed.display_end <= parsed.display_start:
            _add_error(errors, "display_end", "Display window end must be after its start")
        return errors


class LocationSchema(StepSchema):
    step_id = StepId.LOCATION
    title = "Location"

    _TAGS = {kind.value for kind in LocationKind}

    def parse(self, section: SectionBase) -> Any:
        return parse_location(section)

    def error_key(self, loc: Tuple[Any, ...]) -> str:
        # Discriminated-union errors are prefixed with the variant tag
        if loc and loc[0] in self._TAGS:
            loc = loc[1:]
        return ".".join(str(part) for part in loc) or "kind"


class AudienceSchema(StepSchema):
    step_id = StepId.AUDIENCE
    title = "Audience and schedule"
    model = AudienceStep

    def refine(self, parsed: AudienceStep, context: ValidationContext) -> ErrorMap:
        errors: ErrorMap = {}
        if parsed.age_min >= parsed.age_max:
            _add_error(errors, "age_max", "Minimum age must be less than maximum age")
        return errors


class ObjectivesSchema(StepSchema):
    step_id = StepId.OBJECTIVES
    title = "Objectives and KPIs"
    model = ObjectivesStep

    def refine(self, parsed: ObjectivesStep, context: ValidationContext) -> ErrorMap:
        errors: ErrorMap = {}
        kpis = parsed.kpis
        if kpis is None:
            return errors
        if kpis.clicks is not None and kpis.views is not None and kpis.clicks > kpis.views:
            _add_error(errors, "kpis.clicks", "Clicks cannot exceed views")
        if context.budget is not None and kpis.cpc is not None and kpis.clicks:
            planned_spend = kpis.cpc * kpis.clicks
            if planned_spend > context.budget:
                _add_error(
                    errors,
                    "kpis.cpc",
                    f"Target CPC x clicks ({planned_spend:.2f}) exceeds the budget ({context.budget:.2f})",
                )
        return errors


class CreativesSchema(StepSchema):
    step_id = StepId.CREATIVES
    title = "Creatives"
    model = CreativesStep


DEFAULT_STEP_SCHEMAS: Tuple[StepSchema, ...] = (
    BasicInfoSchema(),
    LocationSchema(),
    AudienceSchema(),
    ObjectivesSchema(),
    CreativesSchema(),
)


def get_schema(step_id: StepId) -> StepSchema:
    for schema in DEFAULT_STEP_SCHEMAS:
        if schema.step_id == step_id:
            return schema
    raise KeyError(step_id)


# ====================
# Step Descriptors
# ====================

ExtraValidator = Callable[[WizardSnapshot, ValidationContext], Awaitable[StepValidationResult]]


class WizardStep:
    """
    Step descriptor held by the wizard: id, async validate(), is_complete().

    An optional async extra validator runs after the schema passes (for
    checks that need a collaborator).
    """

    def __init__(self, schema: StepSchema, extra_validator: Optional[ExtraValidator] = None):
        self.schema = schema
        self.extra_validator = extra_validator

    @property
    def id(self) -> StepId:
        return self.schema.step_id

    @property
    def title(self) -> str:
        return self.schema.title

    async def validate(
        self, snapshot: WizardSnapshot, context: ValidationContext
    ) -> StepValidationResult:
        result = self.schema.validate_snapshot(snapshot, context)
        if result.valid and self.extra_validator is not None:
            result = await self.extra_validator(snapshot, context)
        return result

    def is_complete(self, snapshot: WizardSnapshot, context: ValidationContext) -> Optional[bool]:
        """None while nothing was entered, otherwise whether the schema passes"""
        if snapshot.section(self.id.value).is_empty():
            return None
        return self.schema.validate_snapshot(snapshot, context).valid

    def __repr__(self) -> str:
        return f"WizardStep({self.id.value})"


def build_default_steps(schemas: Sequence[StepSchema] = DEFAULT_STEP_SCHEMAS) -> List[WizardStep]:
    return [WizardStep(schema) for schema in schemas]


__all__ = [
    "MIN_DRAFT_TITLE_LENGTH",
    "ValidationContext",
    "meets_draft_precondition",
    "BasicInfoStep",
    "AudienceStep",
    "KpiTargetsStep",
    "ObjectivesStep",
    "CreativesStep",
    "StepSchema",
    "BasicInfoSchema",
    "LocationSchema",
    "AudienceSchema",
    "ObjectivesSchema",
    "CreativesSchema",
    "DEFAULT_STEP_SCHEMAS",
    "get_schema",
    "WizardStep",
    "build_default_steps",
]
