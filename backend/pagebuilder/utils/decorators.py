from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity

def clinic_access_required(fn):
    """
    The token's ``clinic_id`` claim must match the ``clinic_id`` in the URL.
    Routes without one act on the token's clinic.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        claims = get_jwt()
        token_clinic = claims.get("clinic_id")
        if not token_clinic:
            return jsonify({"error": "Clinic context missing"}), 400

        path_clinic = kwargs.get("clinic_id")
        if path_clinic is not None and path_clinic != token_clinic:
            return jsonify({"error": "Clinic mismatch"}), 403

        g.current_clinic_id = token_clinic
        g.current_user_id = get_jwt_identity()
        return fn(*args, **kwargs)
    return wrapper

def roles_required(*allowed_roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if get_jwt().get("role") not in allowed_roles:
                return jsonify({"error": "Insufficient permissions"}), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
