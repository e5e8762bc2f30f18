"""Blueprint file uploads for checklist items."""
from flask import Blueprint, current_app, jsonify, request
import logging
import uuid
from ..models import db, Blueprint as BlueprintRecord
from ..services.cloud_storage import get_cloud_storage
from ..utils import api_error, current_user, handle_api_exception
from shared.enums import BlueprintStatus
from shared.schemas import BlueprintRecordSchema
from shared.utils import compute_file_hash, safe_file_name
from shared.validation import ValidationError, validate_required, validate_string_length, validate_template_id

logger = logging.getLogger(__name__)

bp = Blueprint('uploads', __name__, url_prefix='/api')

DEFAULT_MAX_BLUEPRINT_BYTES = 50 * 1024 * 1024


def stream_size(stream):
    start = stream.tell()
    stream.seek(0, 2)
    size = stream.tell() - start
    stream.seek(start)
    return size


@bp.route('/blueprints', methods=['POST'])
def upload_blueprint():
    """Store one blueprint file (multipart field 'file') for a checklist item."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return api_error('file is required')
    try:
        template_id = validate_template_id(request.form.get('template_id'))
        item_id = validate_string_length(validate_required(request.form.get('item_id'), 'item_id'), 'item_id', 1, 100)
    except ValidationError as e:
        return api_error(str(e))

    size = stream_size(upload.stream)
    max_bytes = current_app.config.get('MAX_BLUEPRINT_BYTES', DEFAULT_MAX_BLUEPRINT_BYTES)
    if size == 0:
        return api_error('file is empty')
    if size > max_bytes:
        return api_error(f'file exceeds {max_bytes} bytes', 413)

    user = current_user()
    blueprint_id = str(uuid.uuid4())
    file_name = safe_file_name(upload.filename, default='blueprint')
    storage = get_cloud_storage()
    object_name = storage.object_name_for(user.id, template_id, blueprint_id, file_name)
    hash_value = compute_file_hash(upload.stream)

    try:
        url = storage.upload_blueprint(object_name, upload.stream, upload.mimetype or 'application/octet-stream')
    except Exception as e:
        return handle_api_exception(e, "upload blueprint", 502)

    try:
        record = BlueprintRecord(
            id=blueprint_id,
            user_id=user.id,
            template_id=template_id,
            item_id=item_id,
            file_name=file_name,
            file_size=size,
            url=url,
            object_name=object_name,
            analysis_status=BlueprintStatus.PENDING,
            hash_value=hash_value,
        )
        db.session.add(record)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        storage.delete_blueprint(object_name)
        return handle_api_exception(e, "record blueprint")

    logger.info(f"Stored blueprint {blueprint_id} ({size} bytes) for {template_id}/{item_id}")
    return jsonify(BlueprintRecordSchema.model_validate(record).model_dump(mode='json')), 201


@bp.route('/blueprints/<blueprint_id>', methods=['DELETE'])
def delete_blueprint(blueprint_id):
    """Delete the stored blob first, then the record."""
    record = BlueprintRecord.query.filter_by(id=blueprint_id, user_id=current_user().id).first()
    if record is None:
        return api_error('Blueprint not found', 404)

    try:
        get_cloud_storage().delete_blueprint(record.object_name)
    except Exception as e:
        return handle_api_exception(e, "delete blueprint", 502)

    try:
        db.session.delete(record)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return handle_api_exception(e, "delete blueprint record")
    return jsonify({'message': 'Blueprint deleted', 'id': blueprint_id})
