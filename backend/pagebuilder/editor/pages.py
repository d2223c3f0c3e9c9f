"""
Multi-Page Manager.

Site-level operations: create, rename, delete and template pages, plus the
navbar/footer/theme records that are versioned with the pages. Each function
returns a new ``SiteDocument`` or a ``ValidationError`` value; the input site
is never mutated.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, List, Mapping, Optional, Union

from pagebuilder.domain.document import STYLE_THEMES, PageDocument, SiteDocument
from pagebuilder.domain.exceptions import FieldError, ValidationError
from pagebuilder.domain.invariants.page import assert_site
from pagebuilder.domain.schema import new_id
from pagebuilder.domain.templates import get_page_template

logger = logging.getLogger(__name__)

SiteResult = Union[SiteDocument, ValidationError]

# Paths already taken by the public clinic routes.
RESERVED_SLUGS = frozenset({"home", "book", "review", "queue-display", "api", "admin"})

_INVALID_RUN = re.compile(r"[^a-z0-9-]+")
_DASH_RUN = re.compile(r"-{2,}")


def normalize_slug(candidate: str) -> str:
    """
    Lowercase, turn every run of characters outside ``[a-z0-9-]`` into one
    dash, collapse repeated dashes and trim dashes at both ends.

    >>> normalize_slug("My Page!!")
    'my-page'
    """
    slug = _INVALID_RUN.sub("-", (candidate or "").lower())
    slug = _DASH_RUN.sub("-", slug)
    return slug.strip("-")


def validate_slug(site: SiteDocument, slug: str, exclude_page_id: Optional[str] = None) -> List[FieldError]:
    if not slug:
        return [FieldError("slug", "Slug is required")]
    if slug in RESERVED_SLUGS:
        return [FieldError("slug", f"'{slug}' is reserved")]
    for page in site.pages:
        if page.id != exclude_page_id and page.slug == slug:
            return [FieldError("slug", f"A page with slug '{slug}' already exists")]
    return []


def _finish(site: SiteDocument, action: str, **details: Any) -> SiteDocument:
    assert_site(site)
    logger.debug("site %s: %s %s", site.clinic_id, action, details)
    return site


def create_page(
    site: SiteDocument,
    slug_candidate: str,
    title_en: str,
    title_ne: Optional[str] = None,
) -> SiteResult:
    slug = normalize_slug(slug_candidate)
    title_en = (title_en or "").strip()

    errors = validate_slug(site, slug)
    if not title_en:
        errors.append(FieldError("title_en", "Title is required"))
    if errors:
        return ValidationError(errors)

    new_site = copy.deepcopy(site)
    new_site.pages.append(
        PageDocument(
            id=new_id(),
            clinic_id=site.clinic_id,
            slug=slug,
            title_en=title_en,
            title_ne=(title_ne or "").strip() or title_en,
        )
    )
    return _finish(new_site, "page.create", slug=slug)


def delete_page(site: SiteDocument, page_id: str) -> SiteResult:
    index = site.page_index(page_id)
    if site.pages[index].is_home:
        return ValidationError.single("page", "The home page cannot be deleted")

    new_site = copy.deepcopy(site)
    del new_site.pages[index]
    return _finish(new_site, "page.delete", page_id=page_id)


def rename_page(
    site: SiteDocument,
    page_id: str,
    title_en: Optional[str] = None,
    title_ne: Optional[str] = None,
    slug: Optional[str] = None,
) -> SiteResult:
    index = site.page_index(page_id)
    page = site.pages[index]
    errors: List[FieldError] = []

    if title_en is not None and not title_en.strip():
        errors.append(FieldError("title_en", "Title is required"))

    new_slug = page.slug
    if slug is not None:
        if page.is_home:
            errors.append(FieldError("slug", "The home page has no slug"))
        else:
            new_slug = normalize_slug(slug)
            errors.extend(validate_slug(site, new_slug, exclude_page_id=page_id))

    if errors:
        return ValidationError(errors)

    new_site = copy.deepcopy(site)
    target = new_site.pages[index]
    if title_en is not None:
        target.title_en = title_en.strip()
    if title_ne is not None:
        target.title_ne = title_ne.strip()
    target.slug = new_slug
    return _finish(new_site, "page.rename", page_id=page_id, slug=new_slug)


def unique_slug(site: SiteDocument, base: str) -> str:
    """``base``, or ``base-2``, ``base-3`` ... whichever is free first."""
    base = normalize_slug(base) or "page"
    taken = {p.slug for p in site.pages} | RESERVED_SLUGS
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


def create_from_template(site: SiteDocument, template_id: str) -> SiteDocument:
    template = get_page_template(template_id)
    new_site = copy.deepcopy(site)
    slug = unique_slug(site, template.slug_base)
    new_site.pages.append(
        PageDocument(
            id=new_id(),
            clinic_id=site.clinic_id,
            slug=slug,
            title_en=template.title_en,
            title_ne=template.title_ne,
            sections=template.build_sections(),
        )
    )
    return _finish(new_site, "page.template", template=template_id, slug=slug)


def toggle_page_enabled(site: SiteDocument, page_id: str) -> SiteDocument:
    index = site.page_index(page_id)
    new_site = copy.deepcopy(site)
    page = new_site.pages[index]
    page.enabled = not page.enabled
    return _finish(new_site, "page.enabled", page_id=page_id, enabled=page.enabled)


# ------------------------
# Site-wide records
# ------------------------

def update_navbar(site: SiteDocument, navbar: Mapping[str, Any]) -> SiteResult:
    if not isinstance(navbar.get("links", []), list):
        return ValidationError.single("navbar.links", "Links must be a list")
    new_site = copy.deepcopy(site)
    new_site.navbar = {**new_site.navbar, **copy.deepcopy(dict(navbar))}
    return _finish(new_site, "navbar.update", fields=sorted(navbar))


def update_footer(site: SiteDocument, footer: Mapping[str, Any]) -> SiteDocument:
    new_site = copy.deepcopy(site)
    new_site.footer = {**new_site.footer, **copy.deepcopy(dict(footer))}
    return _finish(new_site, "footer.update", fields=sorted(footer))


def set_style_theme(site: SiteDocument, theme_id: str) -> SiteResult:
    if theme_id not in STYLE_THEMES:
        return ValidationError.single("style_theme_id", f"Must be one of {', '.join(STYLE_THEMES)}")
    new_site = copy.deepcopy(site)
    new_site.style_theme_id = theme_id
    return _finish(new_site, "theme.set", theme=theme_id)


def toggle_site_enabled(site: SiteDocument) -> SiteDocument:
    new_site = copy.deepcopy(site)
    new_site.enabled = not new_site.enabled
    return _finish(new_site, "site.enabled", enabled=new_site.enabled)
