from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import create_access_token, decode_token
from jwt.exceptions import PyJWTError
from flask_jwt_extended.exceptions import JWTExtendedException
from sqlalchemy.exc import SQLAlchemyError

from stockfolio.extensions import jwt
from stockfolio.Store.PortfolioStore import get_store
from stockfolio.Utils.Errors import AuthError, ConflictError
from stockfolio.Utils.Responses import error_response, json_object

auth_bp = Blueprint("auth", __name__)


def _credentials():
    # non-object bodies are treated as carrying no credentials
    data = json_object() or {}
    username = data.get("username")
    password = data.get("password")
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    return username.strip(), password


def issue_token(username: str) -> str:
    # lifetime comes from JWT_ACCESS_TOKEN_EXPIRES
    return create_access_token(identity=username)


def verify_token(token: str) -> str:
    """Return the username a bearer token was issued to.

    Raises AuthError when the token is missing, malformed, expired or
    signed with another key.
    """
    if not token:
        raise AuthError("Missing token")
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException) as e:
        raise AuthError(f"Invalid token: {e}")
    username = claims.get(current_app.config["JWT_IDENTITY_CLAIM"])
    if not username:
        raise AuthError("Invalid token: no subject")
    return username


@auth_bp.route("/register", methods=["POST"])
def register():
    username, password = _credentials()
    if not username or not password:
        return error_response("Username and password required", 400)

    try:
        get_store().add_user(username, password)
    except ConflictError as e:
        return error_response(str(e), 409)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Registration failed for {username}: {str(e)}", exc_info=True)
        return error_response("Registration failed", 500)

    current_app.logger.info(f"Registered user {username}")
    return jsonify({"success": True}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    username, password = _credentials()
    if not username or not password:
        return error_response("Username and password required", 400)

    try:
        user = get_store().find_user(username)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Login lookup failed for {username}: {str(e)}", exc_info=True)
        return error_response("Login failed", 500)

    if not user or not user.check_password(password):
        current_app.logger.warning(f"Failed login attempt for {username}")
        return error_response("Invalid credentials", 401)

    token = issue_token(user.username)
    current_app.logger.info(f"User {username} logged in")
    return jsonify({"token": token, "username": user.username}), 200


# --- token failure responses, all reported as 401 {"error": ...} ---

@jwt.unauthorized_loader
def _missing_token(reason):
    return error_response(reason, 401)


@jwt.invalid_token_loader
def _invalid_token(reason):
    current_app.logger.warning(f"Rejected invalid token: {reason}")
    return error_response(f"Invalid token: {reason}", 401)


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    current_app.logger.warning(f"Rejected expired token for {jwt_payload.get('sub')}")
    return error_response("Token has expired", 401)
