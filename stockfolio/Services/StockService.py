from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from stockfolio.Schemas.stock import StockCreate, StockUpdate
from stockfolio.Store.PortfolioStore import get_store
from stockfolio.Utils.Errors import ConflictError
from stockfolio.Utils.Responses import describe_validation_error, error_response, json_object

stocks_bp = Blueprint("stocks", __name__, url_prefix="/stocks")

TRUTHY = {"1", "true", "yes"}


@stocks_bp.route("", methods=["GET"])
@jwt_required()
def list_stocks():
    """
    GET /stocks
    Optional filters: ?bookmark_color=<color> or ?bookmarked=true
    Returns the caller's stocks, newest first.
    """
    username = get_jwt_identity()
    bookmark_color = request.args.get("bookmark_color")
    bookmarked = request.args.get("bookmarked", "").lower() in TRUTHY

    try:
        stocks = get_store().list_stocks(username, bookmark_color=bookmark_color, bookmarked=bookmarked)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Listing stocks failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to fetch stocks", 500)

    return jsonify([s.to_dict() for s in stocks]), 200


@stocks_bp.route("", methods=["POST"])
@jwt_required()
def create_stock():
    """
    POST /stocks
    Body: { "ticker_symbol": "AAPL", "display_name": "Apple Inc.", ... }
    Returns the stored record with username and created_at stamped.
    """
    username = get_jwt_identity()
    body = json_object()
    if body is None:
        return error_response("Request body must be a JSON object", 400)
    try:
        data = StockCreate.model_validate(body)
    except ValidationError as e:
        return error_response(f"Invalid payload: {describe_validation_error(e)}", 400)

    try:
        stock = get_store().add_stock(username, data)
    except ConflictError as e:
        return error_response(str(e), 409)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Adding {data.ticker_symbol} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to add stock", 500)

    current_app.logger.info(f"{username} added {stock.ticker_symbol} to the watchlist")
    return jsonify(stock.to_dict()), 201


@stocks_bp.route("/<string:ticker_symbol>", methods=["PUT"])
@jwt_required()
def update_stock(ticker_symbol):
    """
    PUT /stocks/<ticker_symbol>
    Body: any of display_name, chart_id, is_interesting, bookmark_color
    Answers { "success": true } even when the caller owns no such stock.
    """
    username = get_jwt_identity()
    body = json_object()
    if body is None:
        return error_response("Request body must be a JSON object", 400)
    try:
        changes = StockUpdate.model_validate(body).changes()
    except ValidationError as e:
        return error_response(f"Invalid payload: {describe_validation_error(e)}", 400)

    ticker_symbol = ticker_symbol.upper().strip()
    try:
        matched = get_store().update_stock(username, ticker_symbol, changes)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Updating {ticker_symbol} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to update stock", 500)

    if not matched:
        current_app.logger.debug(f"Update of {ticker_symbol} by {username} matched nothing")
    return jsonify({"success": True}), 200


@stocks_bp.route("/<string:ticker_symbol>", methods=["DELETE"])
@jwt_required()
def delete_stock(ticker_symbol):
    """
    DELETE /stocks/<ticker_symbol>
    Removes the stock and the caller's notes on it. Idempotent.
    """
    username = get_jwt_identity()
    ticker_symbol = ticker_symbol.upper().strip()
    try:
        removed_notes = get_store().delete_stock(username, ticker_symbol)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Deleting {ticker_symbol} failed for {username}: {str(e)}", exc_info=True)
        return error_response("Failed to delete stock", 500)

    current_app.logger.info(f"{username} deleted {ticker_symbol} ({removed_notes} notes removed)")
    return "", 204
