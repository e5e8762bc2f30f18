"""Pydantic schemas for validation and serialization."""
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple, Union, Literal, Annotated
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from shared.enums import BlueprintStatus, RiskLevel, ComplianceStatus
from shared.validation import parse_timestamp, sanitize_html, validate_string_length

NO_RESPONSE = 'No response'


def normalize_risk_level(value):
    """Map free-form model output (e.g. "Medium", " HIGH ") onto RiskLevel values."""
    if isinstance(value, str):
        value = value.strip().lower()
        if value == 'medium':
            return RiskLevel.MODERATE
    return value


# Template catalog schemas
class ItemBase(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    question: str = Field(..., min_length=1, max_length=500)
    required: bool = False
    critical: bool = False
    supports_notes: bool = False
    supports_images: bool = False
    supports_files: bool = False
    supports_deadline: bool = False
    placeholder: Optional[str] = None
    ai_weight: int = Field(default=1, ge=1, le=10)
    risk_category: Optional[str] = None
    compliance_standard: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra='forbid')


class ShortTextItem(ItemBase):
    input_kind: Literal['short_text'] = 'short_text'


class LongTextItem(ItemBase):
    input_kind: Literal['long_text'] = 'long_text'


class NumericItem(ItemBase):
    input_kind: Literal['numeric'] = 'numeric'
    min_value: Optional[float] = None
    max_value: Optional[float] = None


class SelectItem(ItemBase):
    input_kind: Literal['select'] = 'select'
    options: Tuple[str, ...] = Field(..., min_length=1)

    @field_validator('options')
    @classmethod
    def validate_options(cls, v):
        if len(set(v)) != len(v):
            raise ValueError('options must be unique')
        return v


ChecklistItem = Annotated[
    Union[ShortTextItem, LongTextItem, NumericItem, SelectItem],
    Field(discriminator='input_kind'),
]


class Section(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    items: Tuple[ChecklistItem, ...] = ()

    model_config = ConfigDict(frozen=True)


class Template(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = ""
    naics_code: Optional[str] = None
    sections: Tuple[Section, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_unique_item_ids(self):
        seen = set()
        for item in self.iter_items():
            if item.id in seen:
                raise ValueError(f"duplicate item id '{item.id}' in template '{self.id}'")
            seen.add(item.id)
        return self

    def iter_items(self):
        for section in self.sections:
            yield from section.items

    @property
    def total_items(self):
        return sum(len(section.items) for section in self.sections)

    def get_item(self, item_id):
        for item in self.iter_items():
            if item.id == item_id:
                return item
        return None


class TemplateSummary(BaseModel):
    id: str
    title: str
    description: str = ""
    category: str = ""
    section_count: int
    item_count: int


# Response store schemas
class BlueprintUpload(BaseModel):
    id: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(default=0, ge=0)
    url: str = ""
    analysis_status: BlueprintStatus = BlueprintStatus.PENDING
    uploaded_at: Optional[str] = None
    template_id: Optional[str] = None
    item_id: Optional[str] = None


class Response(BaseModel):
    value: str = ""
    timestamp: str
    notes: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    blueprints: List[BlueprintUpload] = Field(default_factory=list)
    deadline: Optional[str] = None
    flagged: bool = False

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v):
        parse_timestamp(v)
        return v

    @field_validator('notes')
    @classmethod
    def sanitize_notes(cls, v):
        if v:
            return sanitize_html(v)
        return v


class Snapshot(BaseModel):
    template_id: str
    title: str = ""
    responses: Dict[str, Response] = Field(default_factory=dict)
    timestamp: str

    model_config = ConfigDict(frozen=True)

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v):
        parse_timestamp(v)
        return v


# Analysis payload schemas
class CollectedItem(BaseModel):
    item_id: str
    question: str
    response: str = NO_RESPONSE
    notes: Optional[str] = None
    critical: bool = False
    flagged: bool = False
    deadline: Optional[str] = None
    ai_weight: int = 1
    risk_category: Optional[str] = None
    compliance_standard: Optional[str] = None
    image_count: int = 0
    blueprints: List[str] = Field(default_factory=list)


class CollectedSection(BaseModel):
    title: str
    responses: List[CollectedItem] = Field(default_factory=list)


class ChecklistPayload(BaseModel):
    template: str
    template_id: str
    sections: List[CollectedSection] = Field(default_factory=list)


class RiskProfile(BaseModel):
    naics_code: str
    industry_name: str = 'Unknown Industry'
    injury_rate: Optional[float] = None
    fatalities: Optional[int] = None
    risk_score: float = Field(default=0.0, ge=0, le=100)
    risk_category: str = 'LOW'
    recommendations: List[str] = Field(default_factory=list)


class ActionItem(BaseModel):
    description: str
    priority: str = 'medium'
    deadline: Optional[str] = None
    assignee: Optional[str] = None


class SafetyAnalysis(BaseModel):
    risk_level: RiskLevel = RiskLevel.MODERATE
    score: int = Field(default=75, ge=0, le=100)
    critical_issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    compliance_status: ComplianceStatus = ComplianceStatus.UNDER_REVIEW
    summary: str = 'Safety analysis completed successfully.'

    @field_validator('risk_level', mode='before')
    @classmethod
    def validate_risk_level(cls, v):
        return normalize_risk_level(v)

    @field_validator('action_items', mode='before')
    @classmethod
    def coerce_action_items(cls, v):
        if isinstance(v, list):
            return [{'description': item} if isinstance(item, str) else item for item in v]
        return v


class BlueprintFinding(BaseModel):
    file_name: str
    observations: List[str] = Field(default_factory=list)
    hazards: List[str] = Field(default_factory=list)


class MultiModalResult(BaseModel):
    overall_risk_score: int = Field(default=50, ge=0, le=100)
    risk_level: RiskLevel = RiskLevel.MODERATE
    summary: str = ""
    checklist_findings: List[str] = Field(default_factory=list)
    blueprint_findings: List[BlueprintFinding] = Field(default_factory=list)
    image_findings: List[str] = Field(default_factory=list)
    hazards_detected: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    compliance_gaps: List[str] = Field(default_factory=list)

    @field_validator('risk_level', mode='before')
    @classmethod
    def validate_risk_level(cls, v):
        return normalize_risk_level(v)


# Durable record schemas (backend API)
class ChecklistResponseCreate(BaseModel):
    template_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(default="Untitled Checklist", max_length=200)
    responses: Dict[str, Any] = Field(default_factory=dict)
    report: Optional[str] = Field(default="", max_length=200000)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return validate_string_length(v, 'title', 1, 200)

    @field_validator('report')
    @classmethod
    def default_report(cls, v):
        return v or ""


class ChecklistResponseRecordSchema(BaseModel):
    id: int
    template_id: str
    title: str
    responses: Dict[str, Any]
    report: Optional[str] = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BlueprintRecordSchema(BaseModel):
    id: str
    file_name: str
    file_size: int
    url: str
    analysis_status: BlueprintStatus
    template_id: str
    item_id: str
    uploaded_at: datetime

    model_config = ConfigDict(use_enum_values=True, from_attributes=True)
