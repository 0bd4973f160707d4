import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .errors import InternalError, ValidationError
from .service import Err, ReceiptService
from .validation import parse_receipt

logger = logging.getLogger(__name__)

receipts_blueprint = Blueprint("receipts", __name__, url_prefix="/receipts")


def get_service() -> ReceiptService:
    return current_app.extensions["receipt_service"]


@receipts_blueprint.route('/process', methods=['POST'])
def process_receipt():
    """
    Validates the receipt JSON, stores it with its points and returns the
    generated id.

    Returns:
        400 Error with per-field messages if the body is invalid
        200 OK and the receipt id otherwise
    """
    receipt = parse_receipt(request.get_json(silent=True))
    receipt_id = get_service().submit(receipt)
    return jsonify({"id": receipt_id})


@receipts_blueprint.route('/<receipt_id>/points', methods=['GET'])
def get_points(receipt_id):
    """
    Looks up the points stored for a receipt id.

    Returns:
        404 Error if the receipt id is not found
        200 OK and the points otherwise
    """
    result = get_service().get_points(receipt_id)
    if isinstance(result, Err):
        return jsonify({"error": str(result.error)}), 404
    return jsonify({"points": result.value})


def register_error_handlers(app: Flask):
    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        logger.info("Rejected receipt: %s", e.errors)
        return jsonify({"error": "Invalid receipt", "errors": e.errors}), 400

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unexpected error while handling %s %s", request.method, request.path)
        return jsonify({"error": str(InternalError())}), 500
