from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from stockfolio.Store.PortfolioStore import get_store
from stockfolio.Utils.Timestamps import to_iso, utc_now

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health_check():
    try:
        get_store().ping()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Health check could not reach the database: {str(e)}")
        return jsonify({"status": "unavailable", "timestamp": to_iso(utc_now())}), 503
    return jsonify({"status": "healthy", "timestamp": to_iso(utc_now())}), 200
