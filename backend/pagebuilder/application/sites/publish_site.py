from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import select

from pagebuilder.extensions import db
from pagebuilder.models.site import ClinicSite
from pagebuilder.models.site_version import SiteVersion
from pagebuilder.utils.transaction import transactional
from pagebuilder.utils.versioning import next_version
from pagebuilder.utils.audit import log_action
from pagebuilder.domain.exceptions import PageNotFound, ValidationError
from pagebuilder.domain.invariants.page import assert_site
from pagebuilder.domain.operations import validate_site
from .load_site import hydrate


def publish_site(
    *,
    clinic_id: str,
    actor_id: str,
) -> Dict[str, int]:
    """
    Publishes the saved draft and creates an immutable version snapshot.

    Publishing a revision that is already live returns the existing version.
    """

    # 1️⃣ Fetch site with row-level lock
    record = (
        db.session.execute(
            select(ClinicSite)
            .where(ClinicSite.clinic_id == clinic_id)
            .with_for_update()
        )
        .scalar_one_or_none()
    )

    if not record:
        raise PageNotFound(clinic_id)

    # 2️⃣ Idempotent re-publish
    if record.published_revision == record.revision:
        existing = SiteVersion.query.filter_by(site_id=record.id, revision=record.revision).first()
        if existing:
            return {"revision": record.revision, "version": existing.version}

    with transactional():
        site = hydrate(record.draft, clinic_id)

        # 3️⃣ Enforce publish-specific invariants and content rules
        assert_site(site, publish=True)
        errors = validate_site(site)
        if errors:
            raise ValidationError(errors, message="Site has incomplete sections")

        # 4️⃣ Apply state change
        snapshot = site.to_dict()
        record.published = snapshot
        record.published_revision = record.revision
        record.published_at = datetime.now(timezone.utc)

        # 5️⃣ Create immutable SiteVersion
        version = SiteVersion()
        version.site_id = record.id
        version.clinic_id = clinic_id
        version.version = next_version(record.id)
        version.revision = record.revision
        version.snapshot = snapshot
        version.created_by = actor_id

        db.session.add(version)
        db.session.flush()  # ensures version.version is available

        # 6️⃣ Audit logging
        log_action(
            action="site.publish",
            entity_type="site",
            entity_id=record.id,
            payload={"version": version.version, "revision": record.revision},
        )

    return {
        "revision": record.revision,
        "version": version.version,
    }
