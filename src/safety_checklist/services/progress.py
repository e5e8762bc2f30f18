"""Completion metrics for catalog checklists and the structured daily inspection."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from shared.enums import HazardSeverity, ToggleState


def percent(done, total):
    """Integer percentage rounded half-up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def is_answered(response):
    return response is not None and response.value != ""


def calculate_progress(template, responses):
    """Percentage of template items with a non-empty value.

    Keys in responses that are not items of the template are ignored.
    """
    total = template.total_items
    answered = sum(1 for item in template.iter_items() if is_answered(responses.get(item.id)))
    return percent(answered, total)


def section_progress(template, responses):
    """Per-section answered/total breakdown, in template order."""
    breakdown = []
    for section in template.sections:
        answered = sum(1 for item in section.items if is_answered(responses.get(item.id)))
        breakdown.append({
            'title': section.title,
            'answered': answered,
            'total': len(section.items),
            'percent': percent(answered, len(section.items)),
        })
    return breakdown


HAZARD_OPTIONS = {
    'fall_risk': ('Fall Risk', HazardSeverity.HIGH),
    'chemical_exposure': ('Chemical Exposure', HazardSeverity.CRITICAL),
    'electrical_hazard': ('Electrical Hazard', HazardSeverity.HIGH),
    'struck_by': ('Struck-By Object', HazardSeverity.MEDIUM),
    'caught_between': ('Caught In/Between', HazardSeverity.HIGH),
    'heat_stress': ('Heat Stress', HazardSeverity.MEDIUM),
    'noise_exposure': ('Noise Exposure', HazardSeverity.LOW),
    'confined_space': ('Confined Space', HazardSeverity.CRITICAL),
    'slip_trip': ('Slip/Trip Hazard', HazardSeverity.MEDIUM),
    'overhead_work': ('Overhead Work', HazardSeverity.MEDIUM),
}

PPE_ITEMS = {
    'hard_hat': 'Hard Hats',
    'safety_vest': 'Safety Vests',
    'steel_toes': 'Steel Toe Boots',
    'safety_glasses': 'Safety Glasses',
    'gloves': 'Work Gloves',
    'hearing_protection': 'Hearing Protection',
}


class StructuredInspection(BaseModel):
    """Daily site inspection captured as typed fields instead of catalog items."""
    site_location: str = ""
    project_phase: str = ""
    weather_condition: str = ""
    temperature: Optional[float] = None
    worker_count: Optional[int] = Field(default=None, ge=0)
    supervisor_name: str = ""
    identified_hazards: List[str] = Field(default_factory=list)
    overall_risk_level: Optional[int] = Field(default=None, ge=1, le=10)
    ppe_compliance: Dict[str, ToggleState] = Field(default_factory=dict)
    equipment_inspected: Optional[ToggleState] = None
    equipment_notes: str = ""
    emergency_plan_reviewed: Optional[ToggleState] = None
    toolbox_talk_conducted: Optional[ToggleState] = None
    additional_notes: str = ""
    hazard_photos: List[str] = Field(default_factory=list)
    site_photos: List[str] = Field(default_factory=list)

    def hazard_severities(self):
        return {h: HAZARD_OPTIONS[h][1] for h in self.identified_hazards if h in HAZARD_OPTIONS}


# Ordered; the completion percentage is computed over exactly these.
COMPLETION_PREDICATES = (
    ('site_location', lambda i: bool(i.site_location)),
    ('project_phase', lambda i: bool(i.project_phase)),
    ('weather_condition', lambda i: bool(i.weather_condition)),
    ('worker_count', lambda i: i.worker_count is not None),
    ('supervisor_name', lambda i: bool(i.supervisor_name)),
    ('identified_hazards', lambda i: len(i.identified_hazards) > 0),
    ('overall_risk_level', lambda i: i.overall_risk_level is not None),
    ('ppe_compliance', lambda i: all(p in i.ppe_compliance for p in PPE_ITEMS)),
    ('equipment_inspected', lambda i: i.equipment_inspected is not None),
    ('emergency_plan_reviewed', lambda i: i.emergency_plan_reviewed is not None),
    ('toolbox_talk_conducted', lambda i: i.toolbox_talk_conducted is not None),
)


def incomplete_fields(inspection):
    return [name for name, check in COMPLETION_PREDICATES if not check(inspection)]


def calculate_structured_completion(inspection):
    done = sum(1 for _, check in COMPLETION_PREDICATES if check(inspection))
    return percent(done, len(COMPLETION_PREDICATES))
