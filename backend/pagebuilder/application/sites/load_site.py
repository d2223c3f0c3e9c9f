from typing import Any, Dict, Optional

from pagebuilder.domain.document import SiteDocument
from pagebuilder.domain.migrate import ensure_current
from pagebuilder.models.site import ClinicSite


def find_site(clinic_id: str) -> Optional[ClinicSite]:
    return ClinicSite.query.filter_by(clinic_id=clinic_id).first()


def hydrate(raw, clinic_id: str) -> SiteDocument:
    """Stored JSON (any supported layout) -> current ``SiteDocument``."""
    return SiteDocument.from_dict(ensure_current(raw, clinic_id), clinic_id=clinic_id)


def load_site(*, clinic_id: str) -> Dict[str, Any]:
    """
    Returns the saved draft and its revision.

    A clinic that has never saved gets a fresh single-page site at revision 0.
    """
    record = find_site(clinic_id)
    if not record:
        return {"site": SiteDocument.empty(clinic_id).to_dict(), "revision": 0}

    return {
        "site": hydrate(record.draft, clinic_id).to_dict(),
        "revision": record.revision,
    }
