"""Templates blueprint: read-only access to the checklist catalog."""
from flask import Blueprint, jsonify
from safety_checklist.catalog import get_template, list_summaries
from ..utils import api_error


bp = Blueprint('templates', __name__, url_prefix='/api')


@bp.route('/templates', methods=['GET'])
def get_templates():
    return jsonify({'templates': [s.model_dump(mode='json') for s in list_summaries()]})


@bp.route('/templates/<template_id>', methods=['GET'])
def get_template_detail(template_id):
    template = get_template(template_id)
    if template is None:
        return api_error('Template not found', 404)
    return jsonify(template.model_dump(mode='json'))
