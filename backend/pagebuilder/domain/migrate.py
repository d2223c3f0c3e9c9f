"""
Upgrade stored page-builder configs to the current site document shape.

Two legacy layouts exist in stored clinic data:

* v1: a flat ``sections`` list with no pages, footer or theme.
* v2 with the original camelCase keys (``isHomePage``, ``headingNe``,
  ``services_grid`` ...) and a ``"home"`` slug on the home page.

``ensure_current`` accepts any of them (or an already-current document) and
returns a dict that ``SiteDocument.from_dict`` can hydrate.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from .document import SITE_SCHEMA_VERSION, default_footer, default_navbar
from .exceptions import SchemaError
from .richtext import looks_like_html, markdown_to_html
from .schema import SECTION_CONTENT, SectionType, new_id

logger = logging.getLogger(__name__)

LEGACY_SECTION_TYPES = {
    "services_grid": SectionType.SERVICES.value,
    "doctor_showcase": SectionType.DOCTORS.value,
    "photo_gallery": SectionType.GALLERY.value,
    "contact_info": SectionType.CONTACT.value,
    "testimonials": SectionType.REVIEWS.value,
    "opd_schedule": SectionType.OPD.value,
    "map_embed": SectionType.MAP.value,
}

LEGACY_PADDING = {"none": "small", "sm": "small", "md": "medium", "lg": "large"}
LEGACY_LAYOUT = {"full": "full", "contained": "contained", "narrow": "contained"}

LEGACY_CONTENT_KEYS = {
    "subtitle": "subheading_en",
    "subtitleNe": "subheading_ne",
    "source": "mode",
    "manualServices": "services",
    "manualPhotos": "photos",
    "manualLat": "lat",
    "manualLng": "lng",
}

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def _convert_key(key: str, known: set) -> str:
    if key in LEGACY_CONTENT_KEYS:
        return LEGACY_CONTENT_KEYS[key]
    if key.endswith("Ne") and len(key) > 2:
        return f"{_snake(key[:-2])}_ne"
    snake = _snake(key)
    if snake not in known and f"{snake}_en" in known:
        return f"{snake}_en"
    return snake


def _convert_mapping(data: Mapping[str, Any], known: set = frozenset()) -> Dict[str, Any]:
    converted: Dict[str, Any] = {}
    for key, value in data.items():
        new_key = _convert_key(key, known)
        if isinstance(value, list):
            value = [_convert_mapping(v) if isinstance(v, Mapping) else v for v in value]
        elif isinstance(value, Mapping):
            value = _convert_mapping(value)
        converted[new_key] = value
    return converted


def _item_keys(section_type: SectionType, list_name: str) -> set:
    item_cls = SECTION_CONTENT[section_type].ITEM_TYPES.get(list_name)
    if item_cls is None:
        return set()
    return set(item_cls.__dataclass_fields__)


def upgrade_section(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert one legacy section (``data`` payload, camelCase keys)."""
    if not isinstance(raw, Mapping):
        raise SchemaError("Each section must be an object")
    if "content" in raw and "data" not in raw:
        return dict(raw)

    type_value = raw.get("type")
    if isinstance(type_value, str):
        type_value = LEGACY_SECTION_TYPES.get(type_value, type_value)
    section_type = SectionType.coerce(type_value)
    content_cls = SECTION_CONTENT[section_type]
    known = set(content_cls.field_names())

    data = raw.get("data") or {}
    if not isinstance(data, Mapping):
        raise SchemaError("Section data must be an object")
    data = dict(data)
    if section_type is SectionType.GALLERY and not data.get("variant"):
        data["variant"] = data.get("layout") or "grid"
    data.pop("layout", None)

    content: Dict[str, Any] = {}
    for key, value in data.items():
        new_key = _convert_key(key, known)
        if new_key in content_cls.ITEM_TYPES and isinstance(value, list):
            item_known = _item_keys(section_type, new_key)
            value = [
                {_convert_key(k, item_known): v for k, v in item.items()}
                for item in value
                if isinstance(item, Mapping)
            ]
        content[new_key] = value

    # text bodies were markdown before the rich-text editor
    if section_type is SectionType.TEXT:
        for key in ("body_en", "body_ne"):
            body = content.get(key)
            if isinstance(body, str) and body and not looks_like_html(body):
                content[key] = markdown_to_html(body)

    style = raw.get("style") or {}
    if not isinstance(style, Mapping):
        raise SchemaError("Section style must be an object")
    return {
        "id": raw.get("id") or new_id(),
        "type": section_type.value,
        "visible": raw.get("visible", True),
        "anchor_id": raw.get("anchorId") or raw.get("anchor_id") or "",
        "style": {
            "background": style.get("bgColor", "white"),
            "text_color": style.get("textColor", "foreground"),
            "padding": LEGACY_PADDING.get(style.get("padding"), "medium"),
            "layout": LEGACY_LAYOUT.get(style.get("layout"), "contained"),
        },
        "content": content,
    }


def _upgrade_page(raw: Mapping[str, Any], clinic_id: str) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise SchemaError("Each page must be an object")
    is_home = raw.get("isHomePage", raw.get("slug") is None)
    return {
        "id": raw.get("id") or new_id(),
        "clinic_id": clinic_id,
        "slug": None if is_home else raw.get("slug"),
        "title_en": raw.get("title", raw.get("title_en", "")),
        "title_ne": raw.get("titleNe", raw.get("title_ne", "")),
        "enabled": raw.get("visible", raw.get("enabled", True)),
        "sections": [upgrade_section(s) for s in raw.get("sections") or []],
    }


def _is_legacy(raw: Mapping[str, Any]) -> bool:
    if raw.get("version") == 1 or "stylePreset" in raw or "templateId" in raw:
        return True
    if "pages" not in raw and isinstance(raw.get("sections"), list):
        return True
    return any("isHomePage" in p for p in raw.get("pages") or [] if isinstance(p, Mapping))


def _legacy_record(raw: Mapping[str, Any], key: str, default) -> Dict[str, Any]:
    value = raw.get(key)
    if not value:
        return default()
    if not isinstance(value, Mapping):
        raise SchemaError(f"{key.capitalize()} must be an object")
    return _convert_mapping(value)


def ensure_current(raw: Optional[Mapping[str, Any]], clinic_id: str) -> Optional[Dict[str, Any]]:
    """
    Return ``raw`` upgraded to the current site document layout.

    ``None`` stays ``None``. Anything unrecognisable is returned unchanged so
    the caller's hydration reports the schema problem.
    """
    if raw is None:
        return None
    if not isinstance(raw, Mapping) or not _is_legacy(raw):
        return raw

    if "pages" in raw:
        if not isinstance(raw["pages"], list):
            raise SchemaError("Site pages must be a list")
        pages: List[Dict[str, Any]] = [_upgrade_page(p, clinic_id) for p in raw["pages"]]
    else:
        pages = [
            _upgrade_page(
                {"isHomePage": True, "title": "Home", "titleNe": "गृहपृष्ठ",
                 "sections": raw.get("sections") or []},
                clinic_id,
            )
        ]

    logger.info("Upgraded legacy page builder config (version=%s) for clinic %s",
                raw.get("version"), clinic_id)

    return {
        "version": SITE_SCHEMA_VERSION,
        "clinic_id": clinic_id,
        "enabled": bool(raw.get("enabled", False)),
        "style_theme_id": raw.get("stylePreset") or "bauhaus",
        "template_id": raw.get("templateId"),
        "navbar": _legacy_record(raw, "navbar", default_navbar),
        "footer": _legacy_record(raw, "footer", default_footer),
        "pages": pages,
    }
