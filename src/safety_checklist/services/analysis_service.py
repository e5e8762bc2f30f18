"""AI analysis collaborators backed by the Gemini REST API."""
import json
import logging
import re

import requests
from pydantic import ValidationError
from tenacity import Retrying, RetryError, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from shared.schemas import MultiModalResult, RiskProfile, SafetyAnalysis
from shared.utils import decode_data_uri
from ..catalog import get_template
from ..errors import AnalysisError

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$')


class GeminiUnavailable(Exception):
    """Transient Gemini failure that is worth retrying."""
    pass


class TextAnalysisClient:
    """Thin client for Gemini generateContent with exponential-backoff retries."""

    def __init__(self, config, session=None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def endpoint(self):
        base = self.config.gemini_base_url.rstrip('/')
        return f"{base}/models/{self.config.gemini_model}:generateContent"

    def complete(self, prompt):
        """Return the model's text answer for a plain prompt."""
        return self.generate([{'text': prompt}])

    def generate(self, parts, json_mode=False):
        """Send content parts and return the concatenated text of the first candidate.

        Raises:
            AnalysisError: When the key is missing, every attempt fails, or
                the answer is empty.
        """
        if not self.config.gemini_api_key:
            raise AnalysisError('Gemini API key not configured')

        generation_config = {
            'temperature': self.config.gemini_temperature,
            'maxOutputTokens': self.config.gemini_max_output_tokens,
        }
        if json_mode:
            generation_config['responseMimeType'] = 'application/json'
        body = {'contents': [{'parts': parts}], 'generationConfig': generation_config}

        retrying = Retrying(
            stop=stop_after_attempt(self.config.analysis_retry_attempts),
            wait=wait_exponential(multiplier=self.config.analysis_retry_delay, max=30),
            retry=retry_if_exception_type((GeminiUnavailable, requests.exceptions.RequestException)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        try:
            for attempt in retrying:
                with attempt:
                    data = self._post(body)
        except RetryError as e:
            cause = e.last_attempt.exception()
            self.logger.error(f"Gemini request failed after {self.config.analysis_retry_attempts} attempts: {cause}")
            raise AnalysisError(f"AI analysis unavailable: {cause}") from cause

        text = self._extract_text(data)
        if not text.strip():
            raise AnalysisError('AI analysis returned an empty response')
        return text

    def _post(self, body):
        response = self.session.post(
            self.endpoint,
            headers={'x-goog-api-key': self.config.gemini_api_key},
            json=body,
            timeout=self.config.gemini_timeout,
        )
        if response.status_code == 429 or response.status_code >= 500:
            raise GeminiUnavailable(f"{response.status_code} {response.reason}")
        if response.status_code != 200:
            raise AnalysisError(f"AI analysis request rejected ({response.status_code})")
        return response.json()

    @staticmethod
    def _extract_text(data):
        candidates = data.get('candidates') or []
        if not candidates:
            return ''
        parts = (candidates[0].get('content') or {}).get('parts') or []
        return ''.join(part.get('text', '') for part in parts)


def parse_json_answer(text, model):
    """Validate a JSON answer (optionally wrapped in a code fence) into model."""
    try:
        return model.model_validate_json(CODE_FENCE.sub('', text.strip()))
    except ValidationError as e:
        logger.error(f"Unparseable {model.__name__} answer: {e}")
        raise AnalysisError('AI analysis returned an unreadable result') from e


def risk_score(injury_rate, fatalities):
    """0-100 score: up to 50 points from the injury rate and 50 from fatalities."""
    score = 0.0
    if injury_rate:
        score += min(injury_rate * 10, 50)
    if fatalities:
        score += min(fatalities * 0.5, 50)
    return round(min(score, 100) * 10) / 10


def risk_category(score):
    if score >= 75:
        return 'CRITICAL'
    if score >= 50:
        return 'HIGH'
    if score >= 25:
        return 'MODERATE'
    return 'LOW'


RISK_RECOMMENDATIONS = {
    'CRITICAL': [
        'Implement immediate safety intervention program',
        'Mandatory daily safety briefings with documentation',
        'Enhanced PPE requirements with compliance monitoring',
        'Third-party safety audit recommended within 30 days',
        'Consider work stoppage for critical hazard assessment',
    ],
    'HIGH': [
        'Increase safety training frequency to weekly sessions',
        'Review and update safety protocols quarterly',
        'Implement weekly safety inspections with reporting',
        'Enhance incident reporting and near-miss tracking',
    ],
    'MODERATE': [
        'Maintain current safety standards with regular review',
        'Conduct monthly safety training updates',
        'Monitor injury trends with quarterly analysis',
        'Ensure OSHA compliance documentation is current',
    ],
    'LOW': [
        'Continue current best practices',
        'Share safety insights with industry peers',
        'Maintain proactive safety culture',
        'Regular safety performance reviews',
    ],
}


ANALYSIS_PROMPT = """You are a certified construction safety professional reviewing a completed site safety checklist.

Checklist:
{payload}

Industry risk profile:
{risk}

Items marked critical or flagged deserve the most attention; ai_weight ranks item importance.
Respond with a JSON object with these keys:
risk_level (one of "low", "moderate", "high", "critical"), score (0-100, higher is safer),
critical_issues (list of strings), recommendations (list of strings),
action_items (list of objects with description, priority, deadline),
compliance_status (one of "compliant", "non_compliant", "requires_attention", "under_review"),
summary (string)."""


class SafetyCompanionAPI:
    """Industry risk profiles and structured checklist analysis."""

    def __init__(self, config, text_client, session=None):
        self.config = config
        self.text_client = text_client
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def naics_code_for(self, template_id):
        template = get_template(template_id)
        if template is not None and template.naics_code:
            return template.naics_code
        return self.config.default_naics_code

    def get_risk_profile(self, template_id, payload=None):
        """Industry risk profile for the template's NAICS code, or None when unavailable."""
        if not self.config.risk_profile_url:
            self.logger.info("Risk profile service not configured")
            return None
        naics_code = self.naics_code_for(template_id)
        url = f"{self.config.risk_profile_url.rstrip('/')}/api/osha/risk-profile/{naics_code}"
        try:
            response = self.session.get(url, timeout=self.config.api_timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.warning(f"Risk profile unavailable for NAICS {naics_code}: {e}")
            return None

        injury_rate = data.get('injury_rate')
        fatalities = data.get('fatalities')
        score = risk_score(injury_rate, fatalities)
        category = risk_category(score)
        try:
            return RiskProfile(
                naics_code=naics_code,
                industry_name=data.get('industry_name') or 'Unknown Industry',
                injury_rate=injury_rate,
                fatalities=fatalities,
                risk_score=score,
                risk_category=category,
                recommendations=RISK_RECOMMENDATIONS[category],
            )
        except ValidationError as e:
            self.logger.warning(f"Discarding malformed risk profile for NAICS {naics_code}: {e}")
            return None

    def analyze_checklist(self, payload, risk_profile=None):
        """Structured analysis of a collected checklist.

        Raises:
            AnalysisError: On collaborator failure or an unreadable answer.
        """
        prompt = ANALYSIS_PROMPT.format(
            payload=payload.model_dump_json(indent=2),
            risk=risk_profile.model_dump_json(indent=2) if risk_profile else 'Not available',
        )
        text = self.text_client.generate([{'text': prompt}], json_mode=True)
        analysis = parse_json_answer(text, SafetyAnalysis)
        self.logger.info(f"Checklist {payload.template_id} analyzed: risk {analysis.risk_level.value}")
        return analysis


MULTIMODAL_PROMPT = """You are a construction safety engineer. Analyze the checklist below together with the attached site photos and the referenced blueprints.

Checklist:
{payload}

Industry risk profile:
{risk}

Respond with a JSON object with these keys:
overall_risk_score (0-100, higher is riskier), risk_level (one of "low", "moderate", "high", "critical"),
summary (string), checklist_findings (list of strings),
blueprint_findings (list of objects with file_name, observations, hazards),
image_findings (list of strings), hazards_detected (list of strings),
recommendations (list of strings), compliance_gaps (list of strings)."""


class MultiModalAnalysis:
    """Checklist analysis that also sends photos and blueprint references."""

    def __init__(self, text_client):
        self.text_client = text_client
        self.logger = logging.getLogger(self.__class__.__name__)

    def build_parts(self, payload, blueprints, images, risk_profile=None):
        parts = [{'text': MULTIMODAL_PROMPT.format(
            payload=payload.model_dump_json(indent=2),
            risk=json.dumps(risk_profile.model_dump(mode='json'), indent=2) if risk_profile else 'Not available',
        )}]
        for data_uri in images:
            try:
                mime_type, _ = decode_data_uri(data_uri)
            except ValueError:
                self.logger.warning("Skipping image that is not a base64 data URI")
                continue
            parts.append({'inline_data': {'mime_type': mime_type, 'data': data_uri.split(',', 1)[1]}})
        for blueprint in blueprints:
            parts.append({'text': f"\n[Blueprint: {blueprint.file_name} at {blueprint.url}]\n"})
        return parts

    def analyze_comprehensive(self, payload, blueprints, images, risk_profile=None):
        """Raises AnalysisError on collaborator failure or an unreadable answer."""
        parts = self.build_parts(payload, blueprints, images, risk_profile)
        self.logger.info(f"Multi-modal analysis with {len(images)} images and {len(blueprints)} blueprints")
        text = self.text_client.generate(parts, json_mode=True)
        return parse_json_answer(text, MultiModalResult)
