from __future__ import annotations

from typing import Any, Dict

from pagebuilder.domain.document import SiteDocument
from .page import normalize_page


def normalize_site(site: SiteDocument, admin: bool = False) -> Dict[str, Any]:
    """
    Normalizes a site document for the rendering collaborator.

    Notes:
    - the public shape drops disabled pages and hidden sections
    - admin (preview) keeps both and exposes the flags
    """
    pages = [p for p in site.pages if admin or p.enabled]

    return {
        "clinic_id": site.clinic_id,
        "enabled": site.enabled,
        "style_theme_id": site.style_theme_id,
        "navbar": site.navbar,
        "footer": site.footer,
        "pages": [normalize_page(p, admin=admin) for p in pages],
    }
