"""Checklist responses blueprint: owner-scoped durable checklist records."""
from flask import Blueprint, jsonify, request
import logging
from sqlalchemy.exc import SQLAlchemyError
from ..models import db, ChecklistResponseRecord
from ..utils import api_error, current_user, handle_api_exception, parse_json_body
from shared.schemas import ChecklistResponseCreate, ChecklistResponseRecordSchema
from shared.validation import ValidationError, validate_template_id

logger = logging.getLogger(__name__)

bp = Blueprint('checklists', __name__, url_prefix='/api')


@bp.route('/checklist-responses', methods=['POST'])
def create_checklist_response():
    payload, error = parse_json_body(ChecklistResponseCreate)
    if error:
        return error
    try:
        validate_template_id(payload.template_id)
    except ValidationError as e:
        return api_error(str(e))

    user = current_user()
    try:
        record = ChecklistResponseRecord(
            user_id=user.id,
            template_id=payload.template_id,
            title=payload.title,
            responses=payload.responses,
            report=payload.report,
        )
        db.session.add(record)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        return handle_api_exception(e, "save checklist response")

    logger.info(f"Saved checklist response {record.id} for template {record.template_id}")
    return jsonify(ChecklistResponseRecordSchema.model_validate(record).model_dump(mode='json')), 201


@bp.route('/checklist-responses', methods=['GET'])
def list_checklist_responses():
    """The current user's records, newest first, optionally for one template."""
    query = ChecklistResponseRecord.query.filter_by(user_id=current_user().id)
    template_id = request.args.get('template_id')
    if template_id:
        query = query.filter_by(template_id=template_id)
    records = query.order_by(ChecklistResponseRecord.created_at.desc(), ChecklistResponseRecord.id.desc()).all()
    return jsonify([ChecklistResponseRecordSchema.model_validate(r).model_dump(mode='json') for r in records])


@bp.route('/checklist-responses/<int:record_id>', methods=['GET'])
def get_checklist_response(record_id):
    record = ChecklistResponseRecord.query.filter_by(id=record_id, user_id=current_user().id).first()
    if record is None:
        return api_error('Checklist response not found', 404)
    return jsonify(ChecklistResponseRecordSchema.model_validate(record).model_dump(mode='json'))
