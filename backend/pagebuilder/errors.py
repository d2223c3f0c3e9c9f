from flask import current_app, jsonify
from pagebuilder.domain.exceptions import (
    PageNotFound,
    SaveConflict,
    SchemaError,
    SectionNotFound,
    ValidationError,
)
from pagebuilder.domain.invariants.exceptions import InvariantViolation

def register_error_handlers(app):
    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(SchemaError)
    def handle_schema_error(error):
        response = jsonify({
            "error": "SchemaError",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        response = jsonify(error.to_dict())
        response.status_code = 422
        return response

    @app.errorhandler(PageNotFound)
    @app.errorhandler(SectionNotFound)
    def handle_not_found(error):
        response = jsonify({
            "error": "NotFound",
            "message": str(error)
        })
        response.status_code = 404
        return response

    @app.errorhandler(SaveConflict)
    def handle_save_conflict(error):
        current_app.logger.info("Rejected stale save: %s", error)
        response = jsonify({
            "error": "SaveConflict",
            "message": str(error),
            "revision": error.server_revision
        })
        response.status_code = 409
        return response

