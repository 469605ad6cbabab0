# Overview: Ledger error taxonomy and the JSON error handlers that report it.

from __future__ import annotations

from flask import Flask, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db


class LedgerError(Exception):
    """Base for errors reported to the caller as {success: false, message}."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(LedgerError, ValueError):
    """400-level input problem."""
    status_code = 400


class NotFoundError(LedgerError):
    """404-level: referenced entity does not exist."""
    status_code = 404


class ConflictError(LedgerError, ValueError):
    """409-level duplicate identity (e.g., product id already taken)."""
    status_code = 409


class ConsistencyError(LedgerError):
    """409-level: the change would break a ledger invariant (e.g., oversell)."""
    status_code = 409


class StorageError(LedgerError):
    """503-level: the store is unavailable or a query failed."""
    status_code = 503


def error_response(message: str, status_code: int, details: dict | None = None):
    body = {"success": False, "message": message}
    if details:
        body["details"] = details
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc: SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Storage failure")
        return error_response("Storage error", StorageError.status_code)

    @app.errorhandler(404)
    def handle_not_found(exc):
        return error_response("Not found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return error_response("Method not allowed", 405)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        db.session.rollback()
        current_app.logger.exception("Unhandled error on %s", request.path)
        return error_response("Internal server error", 500)
