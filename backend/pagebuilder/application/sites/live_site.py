from typing import Any, Dict

from pagebuilder.domain.exceptions import PageNotFound
from pagebuilder.normalizers.site import normalize_site
from .load_site import find_site, hydrate


def live_site(*, clinic_id: str, preview: bool = False) -> Dict[str, Any]:
    """
    The document the public renderer should draw.

    ``preview`` serves the saved draft with hidden sections and disabled pages
    included; otherwise only the published snapshot is served, and only while
    that snapshot has the site switched on.
    """
    record = find_site(clinic_id)
    if not record:
        raise PageNotFound(clinic_id)

    if preview:
        return {
            "site": normalize_site(hydrate(record.draft, clinic_id), admin=True),
            "revision": record.revision,
        }

    if record.published is None:
        raise PageNotFound(clinic_id)

    site = hydrate(record.published, clinic_id)
    if not site.enabled:
        raise PageNotFound(clinic_id)

    return {
        "site": normalize_site(site),
        "revision": record.published_revision,
    }
