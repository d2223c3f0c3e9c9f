"""Shared fixtures: a Flask app on in-memory SQLite and JWT helpers."""

from __future__ import annotations

import typing as typ

import pytest
from flask_jwt_extended import create_access_token

from pagebuilder import create_app
from pagebuilder.extensions import db

CLINIC_ID = "clinic-1"


@pytest.fixture()
def app(tmp_path):
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers(app) -> typ.Callable[..., dict[str, str]]:
    """Build an Authorization header for a clinic user."""

    def build(clinic_id: str = CLINIC_ID, role: str = "admin", user: str = "user-1") -> dict[str, str]:
        token = create_access_token(
            identity=user,
            additional_claims={"clinic_id": clinic_id, "role": role},
        )
        return {"Authorization": f"Bearer {token}"}

    return build
