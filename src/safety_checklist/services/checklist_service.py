"""Durable checklist records stored by the backend."""
import logging

import requests
from pydantic import ValidationError

from shared.schemas import ChecklistResponseCreate, ChecklistResponseRecordSchema
from .api_service import APIService
from ..errors import PersistenceWarning


class ChecklistService:
    def __init__(self, api_service):
        self.api = api_service
        self.logger = logging.getLogger(self.__class__.__name__)

    def save_checklist_response(self, template_id, title, responses, report=""):
        """Create a durable record owned by the current user.

        Raises:
            PersistenceWarning: If the record could not be stored.
        """
        payload = ChecklistResponseCreate(
            template_id=template_id,
            title=title,
            responses={k: (v.model_dump(mode='json') if hasattr(v, 'model_dump') else v) for k, v in responses.items()},
            report=report,
        )
        try:
            response = self.api.post('/api/checklist-responses', json=payload.model_dump(mode='json'))
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Failed to save checklist record for {template_id}: {e}")
            raise PersistenceWarning() from e
        if response.status_code != 201:
            message = APIService.error_message(response, 'Save failed')
            self.logger.error(f"Checklist record rejected: {response.status_code} {message}")
            raise PersistenceWarning()
        try:
            return ChecklistResponseRecordSchema.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise PersistenceWarning() from e

    def get_checklist_response_history(self, template_id):
        """Durable records for a template, newest first. Empty on failure."""
        try:
            response = self.api.get('/api/checklist-responses', params={'template_id': template_id})
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Could not fetch checklist history for {template_id}: {e}")
            return []
        if response.status_code != 200:
            self.logger.warning(f"Checklist history request failed: {response.status_code}")
            return []
        try:
            return [ChecklistResponseRecordSchema.model_validate(r) for r in response.json()]
        except (ValueError, TypeError, ValidationError) as e:
            self.logger.warning(f"Discarding unreadable checklist history for {template_id}: {e}")
            return []
