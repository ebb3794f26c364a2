from flask import jsonify, request
from pydantic import ValidationError


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def json_object():
    """The request's JSON body as a dict; {} when there is none, None when it isn't an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into one line, e.g. 'ticker_symbol: Field required'."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "body"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)
