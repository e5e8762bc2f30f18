"""Authentication blueprint: user registration and bearer tokens."""
from flask import Blueprint, request, jsonify, g
import secrets
import logging
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash, check_password_hash
from ..models import db
from ..utils import api_error, current_user, handle_api_exception
from shared.models import User, AuthToken
from shared.validation import ValidationError, validate_required, validate_string_length

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api')

PUBLIC_PATHS = ('/api/auth/login', '/api/auth/register')
PASSWORD_MIN_LENGTH = 8


def user_payload(user):
    return {'id': user.id, 'username': user.username, 'email': user.email}


def bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[len('Bearer '):].strip()
    return None


@bp.route('/auth/register', methods=['POST'])
def register():
    """Register a new user."""
    data = request.get_json(silent=True) or {}
    try:
        username = validate_string_length(validate_required(data.get('username'), 'username'), 'username', 3, 80)
        email = validate_string_length(validate_required(data.get('email'), 'email'), 'email', 3, 120)
        password = validate_required(data.get('password'), 'password')
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"password must be at least {PASSWORD_MIN_LENGTH} characters")
    except ValidationError as e:
        return api_error(str(e))

    if User.query.filter((User.username == username) | (User.email == email)).first():
        return api_error('User already exists')

    try:
        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
        )
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        return handle_api_exception(e, "register user")

    logger.info(f"Registered user {user.id}")
    return jsonify({
        'message': 'User registered successfully',
        'user': user_payload(user),
    }), 201


@bp.route('/auth/login', methods=['POST'])
def login():
    """Login user and return token."""
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password') or ''

    user = User.query.filter_by(username=username).first()
    if not user or not check_password_hash(user.password_hash, password):
        return api_error('Invalid username or password', 401)

    token = secrets.token_urlsafe(32)
    try:
        db.session.add(AuthToken(token=token, user_id=user.id))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        return handle_api_exception(e, "log in")

    return jsonify({'token': token, 'user': user_payload(user)})


@bp.route('/auth/logout', methods=['POST'])
def logout():
    """Logout user by invalidating token."""
    token = bearer_token()
    if not token:
        return api_error('Token required')

    entry = AuthToken.query.filter_by(token=token).first()
    if not entry:
        return api_error('Invalid token')
    try:
        db.session.delete(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        return handle_api_exception(e, "log out")
    return jsonify({'message': 'Logged out successfully'})


@bp.route('/auth/me', methods=['GET'])
def me():
    """Get current user info."""
    return jsonify(user_payload(current_user()))


def init_auth(app):
    """Require a valid bearer token on every /api route except login and register."""
    @app.before_request
    def check_auth():
        if not request.path.startswith('/api') or request.path.startswith(PUBLIC_PATHS):
            return None

        token = bearer_token()
        if token:
            entry = AuthToken.query.filter_by(token=token).first()
            if entry:
                g.user = db.session.get(User, entry.user_id)
                if g.user is not None:
                    return None

        return jsonify({'error': 'Authentication required'}), 401
