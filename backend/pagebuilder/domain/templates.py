"""Page templates (one page) and site templates (a whole starter site)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from pagebuilder.utils.order import compact_order
from .document import PageDocument, Section, SiteDocument, default_footer, default_navbar
from .exceptions import SchemaError
from .registry import get_defaults
from .schema import SectionType, new_id


@dataclass(frozen=True)
class PageTemplate:
    id: str
    title_en: str
    title_ne: str
    sections: Tuple[SectionType, ...]
    # content overrides keyed by position in ``sections``
    overrides: Dict[int, Dict[str, Any]] = field(default_factory=dict)

    @property
    def slug_base(self) -> str:
        return self.id

    def build_sections(self) -> List[Section]:
        sections = []
        for index, section_type in enumerate(self.sections):
            section = get_defaults(section_type)
            patch = self.overrides.get(index)
            if patch:
                section.content = section.content.merged(patch)
            sections.append(section)
        return compact_order(sections)


PAGE_TEMPLATES: Dict[str, PageTemplate] = {
    t.id: t
    for t in (
        PageTemplate(
            "about", "About", "बारेमा",
            (SectionType.TEXT, SectionType.DOCTORS, SectionType.FAQ),
            {0: {"heading_en": "About Us", "heading_ne": "हाम्रो बारेमा"}},
        ),
        PageTemplate("booking", "Booking", "बुकिंग", (SectionType.BOOKING, SectionType.OPD)),
        PageTemplate("gallery", "Gallery", "ग्यालेरी", (SectionType.GALLERY,)),
        PageTemplate("contact", "Contact", "सम्पर्क", (SectionType.CONTACT, SectionType.MAP)),
        PageTemplate("doctors", "Our Team", "हाम्रो टोली", (SectionType.DOCTORS,)),
        PageTemplate("faq", "FAQ", "FAQ", (SectionType.FAQ,)),
    )
}


def get_page_template(template_id: str) -> PageTemplate:
    try:
        return PAGE_TEMPLATES[template_id]
    except KeyError as exc:
        raise SchemaError(f"Unknown page template: {template_id!r}") from exc


# ------------------------
# Site templates
# ------------------------

def _nav_link(label_en: str, label_ne: str, href: str) -> Dict[str, Any]:
    return {"id": new_id(), "label_en": label_en, "label_ne": label_ne,
            "href": href, "open_in_new_tab": False}


def _home(clinic_id: str, *types: SectionType) -> PageDocument:
    about = {SectionType.TEXT: {"heading_en": "About Us", "heading_ne": "हाम्रो बारेमा"}}
    sections = []
    for section_type in types:
        section = get_defaults(section_type)
        if section_type in about:
            section.content = section.content.merged(about[section_type])
            section.anchor_id = "about"
        sections.append(section)
    return PageDocument(id=new_id(), clinic_id=clinic_id, sections=compact_order(sections))


def _from_page_template(clinic_id: str, template_id: str) -> PageDocument:
    template = get_page_template(template_id)
    return PageDocument(
        id=new_id(),
        clinic_id=clinic_id,
        slug=template.slug_base,
        title_en=template.title_en,
        title_ne=template.title_ne,
        sections=template.build_sections(),
    )


def _classic(clinic_id: str) -> SiteDocument:
    navbar = default_navbar()
    navbar["links"] = [
        _nav_link("About", "बारेमा", "#about"),
        _nav_link("Services", "सेवा", "#services"),
        _nav_link("Doctors", "डाक्टर", "#doctors"),
        _nav_link("Book", "बुक", "#booking"),
        _nav_link("Contact", "सम्पर्क", "#contact"),
    ]
    home = _home(
        clinic_id,
        SectionType.HERO, SectionType.TEXT, SectionType.SERVICES,
        SectionType.DOCTORS, SectionType.BOOKING, SectionType.CONTACT,
    )
    return SiteDocument(clinic_id=clinic_id, pages=[home], navbar=navbar,
                        footer=default_footer(), style_theme_id="bauhaus", template_id="classic")


def _minimal(clinic_id: str) -> SiteDocument:
    navbar = default_navbar()
    navbar["links"] = [
        _nav_link("Contact", "सम्पर्क", "#contact"),
        _nav_link("Book", "बुक", "#booking"),
    ]
    home = _home(clinic_id, SectionType.HERO, SectionType.CONTACT, SectionType.BOOKING)
    return SiteDocument(clinic_id=clinic_id, pages=[home], navbar=navbar,
                        footer=default_footer(), style_theme_id="minimal", template_id="minimal")


def _full(clinic_id: str) -> SiteDocument:
    navbar = default_navbar()
    navbar["links"] = [
        _nav_link("Home", "गृह", "#"),
        _nav_link("About", "बारेमा", "about"),
        _nav_link("Gallery", "ग्यालेरी", "gallery"),
        _nav_link("Book", "बुक", "#booking"),
        _nav_link("Contact", "सम्पर्क", "#contact"),
    ]
    home = _home(
        clinic_id,
        SectionType.HERO, SectionType.SERVICES, SectionType.DOCTORS, SectionType.BOOKING,
        SectionType.OPD, SectionType.REVIEWS, SectionType.MAP, SectionType.CONTACT,
    )
    pages = [home, _from_page_template(clinic_id, "about"), _from_page_template(clinic_id, "gallery")]
    return SiteDocument(clinic_id=clinic_id, pages=pages, navbar=navbar,
                        footer=default_footer(), style_theme_id="modern", template_id="full")


SITE_TEMPLATES: Dict[str, Callable[[str], SiteDocument]] = {
    "classic": _classic,
    "minimal": _minimal,
    "full": _full,
}


def build_site_template(template_id: str, clinic_id: str) -> SiteDocument:
    try:
        factory = SITE_TEMPLATES[template_id]
    except KeyError as exc:
        raise SchemaError(f"Unknown site template: {template_id!r}") from exc
    return factory(clinic_id)
