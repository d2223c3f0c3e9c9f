import re

from .section import assert_section, assert_section_order, assert_unique_section_ids
from .exceptions import InvariantViolation

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def assert_page(page, publish=False):
    sections = page.sections

    if publish and page.enabled and not sections:
        raise InvariantViolation(
            f"Cannot publish page '{page.slug or 'home'}' without sections."
        )

    assert_section_order(sections)
    assert_unique_section_ids(sections)

    for section in sections:
        assert_section(section)


def assert_site(site, publish=False):
    """
    Structural rules for a whole clinic site:
    - exactly one home page (slug is None)
    - other slugs lowercase [a-z0-9-]+ and unique
    - page ids unique
    """
    homes = [p for p in site.pages if p.slug is None]
    if len(homes) != 1:
        raise InvariantViolation(
            f"Site must have exactly one home page, found {len(homes)}."
        )

    seen_ids = set()
    seen_slugs = set()
    for page in site.pages:
        if page.id in seen_ids:
            raise InvariantViolation(f"Duplicate page id: {page.id}")
        seen_ids.add(page.id)

        if page.slug is not None:
            if not SLUG_PATTERN.match(page.slug):
                raise InvariantViolation(f"Invalid page slug: {page.slug!r}")
            if page.slug in seen_slugs:
                raise InvariantViolation(f"Duplicate page slug: {page.slug}")
            seen_slugs.add(page.slug)

        assert_page(page, publish=publish)
