"""Session state for the checklist client."""
from dataclasses import dataclass, field
from typing import Optional, List

from shared.enums import AnalysisMode


@dataclass
class SessionState:
    """State of the currently open checklist view.

    The response store is discarded on close; durable entries stay in the
    local database.
    """
    current_template: Optional[object] = None
    response_store: Optional[object] = None
    analysis_mode: AnalysisMode = AnalysisMode.INTELLIGENT

    # Saved snapshots for the open template, newest first
    history: List[object] = field(default_factory=list)

    last_result: Optional[object] = None
    closed: bool = True

    def reset_checklist_state(self):
        """Forget everything about the open checklist."""
        self.current_template = None
        self.response_store = None
        self.history = []
        self.last_result = None
        self.closed = True
