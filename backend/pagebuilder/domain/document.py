"""
In-memory document tree edited by the page builder.

A clinic's site is a ``SiteDocument``: navbar, footer and theme records plus
an ordered list of ``PageDocument``s. Exactly one page has ``slug=None`` and
is the implicit home page. Every document serialises to plain JSON through
``to_dict`` / ``from_dict``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pagebuilder.utils.order import compact_order
from .exceptions import PageNotFound, SchemaError, SectionNotFound
from .schema import Content, SectionType, StyleProps, content_class, new_id

SITE_SCHEMA_VERSION = 2

STYLE_THEMES = ("bauhaus", "modern", "minimal", "warm")
DEFAULT_STYLE_THEME = "bauhaus"


def default_navbar() -> Dict[str, Any]:
    return {
        "logo": True,
        "clinic_name": True,
        "links": [],
        "style": {"background": "white", "text_color": "foreground"},
    }


def default_footer() -> Dict[str, Any]:
    return {
        "enabled": True,
        "show_clinic_name": True,
        "show_phone": True,
        "show_email": True,
        "show_address": False,
        "copyright_en": "",
        "copyright_ne": "",
        "style": {"background": "foreground", "text_color": "white"},
    }


@dataclass
class Section:
    id: str
    type: SectionType
    content: Content
    style: StyleProps = field(default_factory=StyleProps)
    order: Optional[int] = None
    visible: bool = True
    anchor_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "order": self.order,
            "visible": self.visible,
            "anchor_id": self.anchor_id,
            "style": self.style.to_dict(),
            "content": self.content.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Section":
        if not isinstance(data, Mapping):
            raise SchemaError("Each section must be an object")
        section_type = SectionType.coerce(data.get("type"))
        return cls(
            id=data.get("id") or new_id(),
            type=section_type,
            order=data.get("order"),
            visible=bool(data.get("visible", True)),
            anchor_id=data.get("anchor_id") or "",
            style=StyleProps.from_dict(data.get("style")),
            content=content_class(section_type).from_dict(data.get("content")),
        )


@dataclass
class PageDocument:
    id: str
    clinic_id: str
    slug: Optional[str] = None
    title_en: str = "Home"
    title_ne: str = "गृहपृष्ठ"
    enabled: bool = True
    sections: List[Section] = field(default_factory=list)

    @property
    def is_home(self) -> bool:
        return self.slug is None

    def section_index(self, section_id: str) -> int:
        for index, section in enumerate(self.sections):
            if section.id == section_id:
                return index
        raise SectionNotFound(section_id)

    def get_section(self, section_id: str) -> Section:
        return self.sections[self.section_index(section_id)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "clinic_id": self.clinic_id,
            "slug": self.slug,
            "title_en": self.title_en,
            "title_ne": self.title_ne,
            "enabled": self.enabled,
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], clinic_id: str | None = None) -> "PageDocument":
        if not isinstance(data, Mapping):
            raise SchemaError("Each page must be an object")
        sections = data.get("sections", [])
        if not isinstance(sections, list):
            raise SchemaError("Page sections must be a list")
        # Stored order wins; list position breaks ties.
        parsed = [Section.from_dict(s) for s in sections]
        parsed = [
            s for _, s in sorted(
                enumerate(parsed),
                key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0], pair[0]),
            )
        ]
        compact_order(parsed)
        return cls(
            id=data.get("id") or new_id(),
            clinic_id=data.get("clinic_id") or clinic_id or "",
            slug=data.get("slug"),
            title_en=data.get("title_en", ""),
            title_ne=data.get("title_ne", ""),
            enabled=bool(data.get("enabled", True)),
            sections=parsed,
        )


@dataclass
class SiteDocument:
    clinic_id: str
    pages: List[PageDocument] = field(default_factory=list)
    navbar: Dict[str, Any] = field(default_factory=default_navbar)
    footer: Dict[str, Any] = field(default_factory=default_footer)
    style_theme_id: str = DEFAULT_STYLE_THEME
    enabled: bool = False
    template_id: Optional[str] = None

    @classmethod
    def empty(cls, clinic_id: str) -> "SiteDocument":
        return cls(clinic_id=clinic_id, pages=[PageDocument(id=new_id(), clinic_id=clinic_id)])

    @property
    def home(self) -> PageDocument:
        for page in self.pages:
            if page.is_home:
                return page
        raise PageNotFound("home")

    def page_index(self, page_id: str) -> int:
        for index, page in enumerate(self.pages):
            if page.id == page_id:
                return index
        raise PageNotFound(page_id)

    def get_page(self, page_id: str) -> PageDocument:
        return self.pages[self.page_index(page_id)]

    def find_by_slug(self, slug: str | None) -> Optional[PageDocument]:
        for page in self.pages:
            if page.slug == slug:
                return page
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": SITE_SCHEMA_VERSION,
            "clinic_id": self.clinic_id,
            "enabled": self.enabled,
            "style_theme_id": self.style_theme_id,
            "template_id": self.template_id,
            "navbar": self.navbar,
            "footer": self.footer,
            "pages": [p.to_dict() for p in self.pages],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], clinic_id: str | None = None) -> "SiteDocument":
        if not isinstance(data, Mapping):
            raise SchemaError("Site document must be an object")
        pages = data.get("pages")
        if not isinstance(pages, list):
            raise SchemaError("Site pages must be a list")
        owner = data.get("clinic_id") or clinic_id or ""
        navbar = data.get("navbar") or default_navbar()
        if not isinstance(navbar, Mapping):
            raise SchemaError("Navbar must be an object")
        if not isinstance(navbar.get("links", []), list):
            raise SchemaError("Navbar links must be a list")
        footer = data.get("footer") or default_footer()
        if not isinstance(footer, Mapping):
            raise SchemaError("Footer must be an object")
        return cls(
            clinic_id=owner,
            pages=[PageDocument.from_dict(p, clinic_id=owner) for p in pages],
            navbar=navbar,
            footer=footer,
            style_theme_id=data.get("style_theme_id") or DEFAULT_STYLE_THEME,
            enabled=bool(data.get("enabled", False)),
            template_id=data.get("template_id"),
        )
