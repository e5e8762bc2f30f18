"""Checklist submission: collect responses, run one analysis strategy, format, save."""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from shared.enums import AnalysisMode, NotificationLevel, PipelineState
from shared.schemas import NO_RESPONSE, ChecklistPayload, CollectedItem, CollectedSection
from .progress import calculate_progress
from .report_formatter import format_multimodal_report, format_standard_safety_report
from ..errors import AnalysisError, ChecklistError, PersistenceWarning

STANDARD_PROMPT = """As a safety expert, please analyze this comprehensive safety checklist and provide detailed recommendations:

{payload}

Please provide a structured analysis including:
1. Critical safety risks identified
2. Compliance status assessment
3. Immediate action items
4. Long-term recommendations
5. Training needs
6. Follow-up requirements

Format your response professionally with clear sections and actionable insights."""

INCOMPLETE_MESSAGE = 'Please complete all checklist items before submitting'


@dataclass
class SubmissionResult:
    state: PipelineState
    report: Optional[str] = None
    analysis: Any = None
    risk_profile: Any = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def succeeded(self):
        return self.state == PipelineState.DONE


def collect(template, responses):
    """Pair every template item with its response.

    Returns (payload, blueprints, images); unanswered items carry the
    NO_RESPONSE sentinel.
    """
    sections = []
    blueprints = []
    images = []
    for section in template.sections:
        collected = []
        for item in section.items:
            response = responses.get(item.id)
            if response is not None:
                blueprints.extend(response.blueprints)
                images.extend(response.images)
            collected.append(CollectedItem(
                item_id=item.id,
                question=item.question,
                response=response.value if response and response.value else NO_RESPONSE,
                notes=response.notes if response else None,
                critical=item.critical,
                flagged=response.flagged if response else False,
                deadline=response.deadline if response else None,
                ai_weight=item.ai_weight,
                risk_category=item.risk_category,
                compliance_standard=item.compliance_standard,
                image_count=len(response.images) if response else 0,
                blueprints=[b.file_name for b in response.blueprints] if response else [],
            ))
        sections.append(CollectedSection(title=section.title, responses=collected))
    payload = ChecklistPayload(template=template.title, template_id=template.id, sections=sections)
    return payload, blueprints, images


class SubmissionPipeline:
    """Runs a checklist submission through Collecting, Analyzing and Formatting.

    Any failure moves to FAILED, publishes one error notification and returns
    the pipeline to IDLE. Persisting the durable record is best-effort.
    """

    def __init__(self, text_client, safety_api, multimodal, checklist_service, events):
        self.text_client = text_client
        self.safety_api = safety_api
        self.multimodal = multimodal
        self.checklist_service = checklist_service
        self.events = events
        self.logger = logging.getLogger(self.__class__.__name__)
        self._state = PipelineState.IDLE

    @property
    def state(self):
        return self._state

    @property
    def processing(self):
        return self._state in (PipelineState.COLLECTING, PipelineState.ANALYZING, PipelineState.FORMATTING)

    def submit(self, template, responses, mode=AnalysisMode.INTELLIGENT):
        if self.processing:
            self.logger.warning("Submission already in progress, ignoring")
            return SubmissionResult(state=self._state)

        progress = calculate_progress(template, responses)
        if progress < 100:
            self.logger.info(f"Submission of {template.id} blocked at {progress}% complete")
            self.events.notify(INCOMPLETE_MESSAGE, NotificationLevel.WARNING)
            return SubmissionResult(state=PipelineState.IDLE, error=INCOMPLETE_MESSAGE)

        result = SubmissionResult(state=PipelineState.COLLECTING)
        try:
            self._state = PipelineState.COLLECTING
            payload, blueprints, images = collect(template, responses)
            self._state = PipelineState.ANALYZING
            if AnalysisMode(mode) == AnalysisMode.STANDARD:
                self._run_standard(payload, result)
            else:
                self._run_intelligent(template, payload, blueprints, images, result)
            if not result.report or not result.report.strip():
                raise AnalysisError('AI analysis returned an empty report')
        except Exception as e:
            message = str(e) if isinstance(e, ChecklistError) else AnalysisError.user_message
            self.logger.error(f"Submission of {template.id} failed: {e}", exc_info=not isinstance(e, ChecklistError))
            self._state = PipelineState.FAILED
            self.events.notify(message, NotificationLevel.ERROR, title='Error processing checklist')
            self._state = PipelineState.IDLE
            return SubmissionResult(state=PipelineState.FAILED, error=message)

        self._persist(template, responses, result)
        self._state = PipelineState.DONE
        result.state = PipelineState.DONE
        self._state = PipelineState.IDLE
        return result

    def _run_standard(self, payload, result):
        prompt = STANDARD_PROMPT.format(payload=json.dumps(payload.model_dump(mode='json'), indent=2))
        text = self.text_client.complete(prompt)
        self._state = PipelineState.FORMATTING
        result.report = text
        self.events.notify('Standard analysis completed successfully!', NotificationLevel.SUCCESS)

    def _run_intelligent(self, template, payload, blueprints, images, result):
        risk_profile = self.safety_api.get_risk_profile(template.id, payload)
        result.risk_profile = risk_profile

        if blueprints or images:
            self.events.notify('Analyzing blueprints and images with AI...', NotificationLevel.INFO)
            analysis = self.multimodal.analyze_comprehensive(payload, blueprints, images, risk_profile)
            if analysis is None:
                raise AnalysisError('Multi-modal analysis returned no result')
            self._state = PipelineState.FORMATTING
            result.analysis = analysis
            result.report = format_multimodal_report(analysis, template.title, len(blueprints), len(images))
            self.events.notify('Complete AI analysis with blueprint pattern recognition finished!', NotificationLevel.SUCCESS)
            return

        analysis = self.safety_api.analyze_checklist(payload, risk_profile)
        if analysis is None:
            raise AnalysisError('Safety analysis returned no result')
        self._state = PipelineState.FORMATTING
        result.analysis = analysis
        result.report = format_standard_safety_report(analysis, template.title)
        if risk_profile is not None:
            self.events.notify(f"Analysis complete! Risk Level: {analysis.risk_level.value.upper()}", NotificationLevel.SUCCESS)
        else:
            self.events.notify('Analysis complete using local intelligence (risk profile unavailable)', NotificationLevel.SUCCESS)

    def _persist(self, template, responses, result):
        try:
            self.checklist_service.save_checklist_response(template.id, template.title, responses, report=result.report)
        except PersistenceWarning as w:
            self.logger.warning(f"Durable save of {template.id} failed: {w}")
            result.warnings.append(str(w))
            self.events.notify(str(w), NotificationLevel.WARNING)
