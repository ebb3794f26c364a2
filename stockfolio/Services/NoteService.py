from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from stockfolio.Schemas.note import NoteCreate, NoteUpdate
from stockfolio.Schemas.stock import normalize_ticker
from stockfolio.Store.PortfolioStore import get_store
from stockfolio.Utils.Errors import ConflictError
from stockfolio.Utils.Responses import describe_validation_error, error_response, json_object

notes_bp = Blueprint("notes", __name__, url_prefix="/notes")


@notes_bp.route("/<string:stock_id>", methods=["GET"])
@jwt_required()
def list_notes(stock_id):
    """
    GET /notes/<stock_id>
    Returns the caller's notes for one stock, newest first.
    """
    username = get_jwt_identity()
    try:
        stock_id = normalize_ticker(stock_id)
    except ValueError as e:
        return error_response(str(e), 400)

    try:
        notes = get_store().list_notes(username, stock_id)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Listing notes on {stock_id} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to fetch notes", 500)

    return jsonify([n.to_dict() for n in notes]), 200


@notes_bp.route("", methods=["POST"])
@jwt_required()
def create_note():
    """
    POST /notes
    Body: { "stock_id": "AAPL", "content": {"kind": "freeform", "text": "..."} }
    A plain string is accepted as freeform content.
    """
    username = get_jwt_identity()
    body = json_object()
    if body is None:
        return error_response("Request body must be a JSON object", 400)
    try:
        data = NoteCreate.model_validate(body)
    except ValidationError as e:
        return error_response(f"Invalid payload: {describe_validation_error(e)}", 400)

    try:
        note = get_store().add_note(username, data)
    except ConflictError as e:
        return error_response(str(e), 409)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Adding note on {data.stock_id} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to add note", 500)

    current_app.logger.info(f"{username} added note {note.id} on {note.stock_id}")
    return jsonify(note.to_dict()), 201


@notes_bp.route("/<string:note_id>", methods=["PUT"])
@jwt_required()
def update_note(note_id):
    username = get_jwt_identity()
    body = json_object()
    if body is None:
        return error_response("Request body must be a JSON object", 400)
    try:
        data = NoteUpdate.model_validate(body)
    except ValidationError as e:
        return error_response(f"Invalid payload: {describe_validation_error(e)}", 400)

    try:
        get_store().update_note(username, note_id, data)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Updating note {note_id} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to update note", 500)

    return jsonify({"success": True}), 200


@notes_bp.route("/<string:note_id>", methods=["DELETE"])
@jwt_required()
def delete_note(note_id):
    username = get_jwt_identity()
    try:
        deleted = get_store().delete_note(username, note_id)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Deleting note {note_id} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to delete note", 500)

    if deleted:
        current_app.logger.info(f"{username} deleted note {note_id}")
    return "", 204
