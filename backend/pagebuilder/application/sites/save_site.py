from typing import Any, Dict, Mapping

from sqlalchemy import select

from pagebuilder.extensions import db
from pagebuilder.models.site import ClinicSite
from pagebuilder.utils.transaction import transactional
from pagebuilder.utils.optimistic_lock import enforce_revision
from pagebuilder.utils.audit import log_action
from pagebuilder.domain.exceptions import SchemaError
from pagebuilder.domain.invariants.page import assert_site
from .load_site import hydrate


def save_site(
    *,
    clinic_id: str,
    actor_id: str,
    site_payload: Mapping[str, Any],
    revision: int,
) -> Dict[str, int]:
    """
    Replace the clinic's saved draft with ``site_payload``.

    Responsibilities:
    - transactional boundary
    - optimistic locking on the revision counter
    - legacy upgrade, structural invariants
    - audit logging
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

    with transactional():
        # 2️⃣ Reject stale writes
        enforce_revision(record, revision)

        # 3️⃣ Hydrate and enforce invariants
        site = hydrate(site_payload, clinic_id)
        if site.clinic_id != clinic_id:
            raise SchemaError("Site document belongs to another clinic")
        assert_site(site)

        # 4️⃣ Apply state change
        if not record:
            record = ClinicSite()
            record.clinic_id = clinic_id
            record.revision = 0
            db.session.add(record)

        record.draft = site.to_dict()
        record.revision = record.revision + 1
        record.updated_by = actor_id
        db.session.flush()

        # 5️⃣ Audit logging
        log_action(
            action="site.save",
            entity_type="site",
            entity_id=record.id,
            payload={
                "revision": record.revision,
                "pages": len(site.pages),
            }
        )

    return {"revision": record.revision}
