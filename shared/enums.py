import enum


class InputKind(str, enum.Enum):
    """Input kinds for checklist items.

    Used as the discriminator of the checklist item union in shared.schemas.
    """
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    NUMERIC = "numeric"
    SELECT = "select"


class BlueprintStatus(str, enum.Enum):
    """Analysis status of an uploaded blueprint."""
    COMPLETED = "completed"
    FAILED = "failed"
    PENDING = "pending"


class AnalysisMode(str, enum.Enum):
    """User-selected analysis strategy for checklist submission."""
    INTELLIGENT = "intelligent"
    STANDARD = "standard"


class PipelineState(str, enum.Enum):
    """Submission pipeline states."""
    IDLE = "idle"
    COLLECTING = "collecting"
    ANALYZING = "analyzing"
    FORMATTING = "formatting"
    DONE = "done"
    FAILED = "failed"


class RiskLevel(str, enum.Enum):
    """Overall risk level reported by safety analysis."""
    CRITICAL = "critical"
    HIGH = "high"
    LOW = "low"
    MODERATE = "moderate"


class ComplianceStatus(str, enum.Enum):
    """Compliance assessment reported by safety analysis."""
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    REQUIRES_ATTENTION = "requires_attention"
    UNDER_REVIEW = "under_review"


class NotificationLevel(str, enum.Enum):
    """Severity of a user-facing notification."""
    ERROR = "error"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


class ToggleState(str, enum.Enum):
    """Tri-state toggle used by the structured daily inspection."""
    FAIL = "fail"
    NOT_APPLICABLE = "na"
    PASS = "pass"


class HazardSeverity(str, enum.Enum):
    """Severity attached to the structured inspection hazard options."""
    CRITICAL = "critical"
    HIGH = "high"
    LOW = "low"
    MEDIUM = "medium"
