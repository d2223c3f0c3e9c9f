from pagebuilder.extensions import db
from .base import BaseModel
from .clinic_mixin import ClinicMixin

class SiteVersion(BaseModel, ClinicMixin):
    __tablename__ = "site_versions"

    site_id = db.Column(
        db.String(36),
        db.ForeignKey("clinic_sites.id"),
        nullable=False
    )

    version = db.Column(db.Integer, nullable=False)
    # draft revision this version was published from
    revision = db.Column(db.Integer, nullable=False)

    snapshot = db.Column(db.JSON, nullable=False)

    created_by = db.Column(db.String(64), nullable=True)

    site = db.relationship("ClinicSite", back_populates="versions")

    __table_args__ = (
        db.UniqueConstraint("site_id", "version", name="uq_site_version"),
        db.UniqueConstraint("site_id", "revision", name="uq_site_version_revision"),
        db.Index("idx_site_version_site", "site_id"),
    )
