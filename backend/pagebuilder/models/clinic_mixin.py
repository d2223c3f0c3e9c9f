from pagebuilder.extensions import db

class ClinicMixin:
    # Clinics live in another service; the id is stored, not joined.
    clinic_id = db.Column(
        db.String(64),
        nullable=False,
        index=True
    )
