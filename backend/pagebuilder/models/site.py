from pagebuilder.extensions import db
from .base import BaseModel
from .clinic_mixin import ClinicMixin

class ClinicSite(BaseModel, ClinicMixin):
    """One page-builder site document per clinic: the saved draft and what is live."""
    __tablename__ = "clinic_sites"

    draft = db.Column(db.JSON, nullable=False)
    revision = db.Column(db.Integer, nullable=False, default=0)
    updated_by = db.Column(db.String(64), nullable=True)

    published = db.Column(db.JSON(none_as_null=True), nullable=True)
    published_revision = db.Column(db.Integer, nullable=True)
    published_at = db.Column(db.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("clinic_id", name="uq_site_per_clinic"),
    )

    versions = db.relationship(
        "SiteVersion",
        back_populates="site",
        order_by="SiteVersion.version",
        cascade="all, delete-orphan"
    )
