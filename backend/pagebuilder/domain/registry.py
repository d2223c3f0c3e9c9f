"""
Section Schema Registry.

Single source of truth for what each ``SectionType`` looks like: its content
class, default style, allowed variants, the editor field set and the
required-content rules checked at save/publish time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence, Tuple, Type

from .document import Section
from .exceptions import FieldError, SchemaError
from .schema import (
    DATA_MODES,
    DESIGN_TOKENS,
    MANUAL,
    Content,
    Item,
    Layout,
    Padding,
    SectionType,
    StyleProps,
    content_class,
    new_id,
)


@dataclass(frozen=True)
class FieldSpec:
    """Describes one editable field of a section's content."""

    name: str
    kind: str  # text | richtext | bool | choice | int | float | image | url | list
    label: str
    choices: Tuple[Any, ...] = ()
    item_fields: Tuple["FieldSpec", ...] = ()

    @property
    def is_rich_text(self) -> bool:
        return self.kind == "richtext"


@dataclass(frozen=True)
class SectionSchema:
    type: SectionType
    label_en: str
    label_ne: str
    description: str
    anchor: str
    variants: Tuple[str, ...]
    fields: Tuple[FieldSpec, ...]
    style: Dict[str, Any] = field(default_factory=dict)
    rules: Tuple[Callable[[Any], List[FieldError]], ...] = ()

    @property
    def content_class(self) -> Type[Content]:
        return content_class(self.type)

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise SchemaError(f"{self.type.value} has no field {name!r}")

    def list_item_class(self, name: str) -> Type[Item]:
        item_cls = self.content_class.ITEM_TYPES.get(name)
        if item_cls is None:
            raise SchemaError(f"{self.type.value}.{name} is not a list field")
        return item_cls


# ------------------------
# Field helpers
# ------------------------

def _text(name: str, label: str) -> FieldSpec:
    return FieldSpec(name, "text", label)


def _localized(name: str, label: str, kind: str = "text") -> Tuple[FieldSpec, FieldSpec]:
    return (
        FieldSpec(f"{name}_en", kind, f"{label} (EN)"),
        FieldSpec(f"{name}_ne", kind, f"{label} (NE)"),
    )


def _choice(name: str, label: str, choices: Sequence[Any]) -> FieldSpec:
    return FieldSpec(name, "choice", label, tuple(choices))


def _bool(name: str, label: str) -> FieldSpec:
    return FieldSpec(name, "bool", label)


def _list(name: str, label: str, *item_fields: FieldSpec) -> FieldSpec:
    return FieldSpec(name, "list", label, item_fields=tuple(item_fields))


COLUMNS = (2, 3, 4)
HEADING = _localized("heading", "Heading")


# ------------------------
# Rule helpers
# ------------------------

def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required(*names: str) -> Callable[[Any], List[FieldError]]:
    def rule(content):
        return [
            FieldError(name, "This field is required")
            for name in names
            if _blank(getattr(content, name))
        ]
    return rule


def _required_items(list_name: str, *names: str, when_manual: bool = False, min_items: int = 0):
    def rule(content):
        if when_manual and content.mode != MANUAL:
            return []
        items = getattr(content, list_name)
        errors = []
        if len(items) < min_items:
            errors.append(FieldError(list_name, f"At least {min_items} item(s) required"))
        for index, item in enumerate(items):
            for name in names:
                if _blank(getattr(item, name)):
                    errors.append(FieldError(f"{list_name}[{index}].{name}", "This field is required"))
        return errors
    return rule


def _one_of(name: str, allowed: Sequence[Any]) -> Callable[[Any], List[FieldError]]:
    def rule(content):
        value = getattr(content, name)
        if value not in allowed:
            return [FieldError(name, f"Must be one of {', '.join(str(a) for a in allowed)}")]
        return []
    return rule


def _int_range(name: str, low: int, high: int | None = None) -> Callable[[Any], List[FieldError]]:
    def rule(content):
        value = getattr(content, name)
        if isinstance(value, bool) or not isinstance(value, int):
            return [FieldError(name, "Must be a whole number")]
        if value < low or (high is not None and value > high):
            bound = f"between {low} and {high}" if high is not None else f"at least {low}"
            return [FieldError(name, f"Must be {bound}")]
        return []
    return rule


def _map_coordinates(content) -> List[FieldError]:
    if content.mode != MANUAL:
        return []
    errors = []
    for name, limit in (("lat", 90), ("lng", 180)):
        value = getattr(content, name)
        if value is None:
            errors.append(FieldError(name, "This field is required"))
        elif isinstance(value, bool) or not isinstance(value, (int, float)) or abs(value) > limit:
            errors.append(FieldError(name, f"Must be between -{limit} and {limit}"))
    return errors


MODE_RULE = _one_of("mode", DATA_MODES)
COLUMNS_RULE = _one_of("columns", COLUMNS)


# ------------------------
# Registry table
# ------------------------

SCHEMAS: Dict[SectionType, SectionSchema] = {
    schema.type: schema
    for schema in (
        SectionSchema(
            type=SectionType.HERO,
            label_en="Hero", label_ne="हिरो",
            description="Large banner with heading and image",
            anchor="hero",
            variants=("centered", "split", "minimal"),
            style={"background": "primary-blue", "text_color": "white",
                   "padding": Padding.LARGE, "layout": Layout.FULL},
            fields=(
                *HEADING,
                *_localized("subheading", "Subheading"),
                FieldSpec("image", "image", "Background image"),
                _bool("show_logo", "Show clinic logo"),
            ),
            rules=(_required("heading_en"),),
        ),
        SectionSchema(
            type=SectionType.TEXT,
            label_en="Text", label_ne="पाठ",
            description="Rich text content",
            anchor="text",
            variants=("standard",),
            fields=(*HEADING, *_localized("body", "Body", kind="richtext")),
            rules=(_required("body_en"),),
        ),
        SectionSchema(
            type=SectionType.SERVICES,
            label_en="Services", label_ne="सेवा",
            description="Grid of clinic services",
            anchor="services",
            variants=("cards", "list", "icons"),
            style={"background": "background"},
            fields=(
                *HEADING,
                _choice("mode", "Source", DATA_MODES),
                _choice("columns", "Columns", COLUMNS),
                _list(
                    "services", "Services",
                    *_localized("name", "Name"),
                    *_localized("description", "Description"),
                    _text("icon", "Icon"),
                ),
            ),
            rules=(MODE_RULE, COLUMNS_RULE, _required_items("services", "name_en", when_manual=True)),
        ),
        SectionSchema(
            type=SectionType.DOCTORS,
            label_en="Doctors", label_ne="डाक्टर",
            description="Show affiliated doctors",
            anchor="doctors",
            variants=("cards", "list", "compact"),
            fields=(
                *HEADING,
                _choice("mode", "Source", DATA_MODES),
                _choice("columns", "Columns", COLUMNS),
                _bool("show_specialty", "Show specialty"),
                _bool("show_degree", "Show degree"),
                _bool("show_role", "Show role"),
            ),
            rules=(MODE_RULE, COLUMNS_RULE),
        ),
        SectionSchema(
            type=SectionType.GALLERY,
            label_en="Gallery", label_ne="ग्यालेरी",
            description="Photo gallery grid",
            anchor="gallery",
            variants=("grid", "carousel", "masonry"),
            style={"background": "background"},
            fields=(
                *HEADING,
                _choice("mode", "Source", DATA_MODES),
                _choice("columns", "Columns", COLUMNS),
                _list(
                    "photos", "Photos",
                    FieldSpec("url", "image", "Photo"),
                    *_localized("caption", "Caption"),
                ),
            ),
            rules=(MODE_RULE, COLUMNS_RULE, _required_items("photos", "url", when_manual=True)),
        ),
        SectionSchema(
            type=SectionType.CONTACT,
            label_en="Contact", label_ne="सम्पर्क",
            description="Contact details and hours",
            anchor="contact",
            variants=("list", "card", "two_column"),
            fields=(
                *HEADING,
                _choice("mode", "Source", DATA_MODES),
                _bool("show_phone", "Show phone"),
                _bool("show_email", "Show email"),
                _bool("show_address", "Show address"),
                _bool("show_website", "Show website"),
                _bool("show_hours", "Show hours"),
            ),
            rules=(MODE_RULE,),
        ),
        SectionSchema(
            type=SectionType.REVIEWS,
            label_en="Reviews", label_ne="समीक्षा",
            description="Patient reviews and ratings",
            anchor="reviews",
            variants=("cards", "carousel", "simple"),
            style={"background": "background"},
            fields=(
                *HEADING,
                _choice("mode", "Source", DATA_MODES),
                FieldSpec("max_count", "int", "Reviews to show"),
            ),
            rules=(MODE_RULE, _int_range("max_count", 1, 50)),
        ),
        SectionSchema(
            type=SectionType.FAQ,
            label_en="FAQ", label_ne="FAQ",
            description="Frequently asked questions",
            anchor="faq",
            variants=("accordion", "list", "two_column"),
            fields=(
                *HEADING,
                _list(
                    "items", "Questions",
                    *_localized("question", "Question"),
                    *_localized("answer", "Answer", kind="richtext"),
                ),
            ),
            rules=(_required_items("items", "question_en", "answer_en"),),
        ),
        SectionSchema(
            type=SectionType.BOOKING,
            label_en="Booking", label_ne="बुकिंग",
            description="Appointment booking widget",
            anchor="booking",
            variants=("standard", "compact", "prominent"),
            fields=HEADING,
        ),
        SectionSchema(
            type=SectionType.OPD,
            label_en="OPD", label_ne="OPD",
            description="OPD schedule display",
            anchor="opd-schedule",
            variants=("table", "cards", "timeline"),
            style={"background": "background"},
            fields=HEADING,
        ),
        SectionSchema(
            type=SectionType.MAP,
            label_en="Map", label_ne="नक्सा",
            description="Embedded location map",
            anchor="map",
            variants=("standard", "with_info", "full_width"),
            fields=(
                *HEADING,
                _choice("mode", "Source", DATA_MODES),
                FieldSpec("lat", "float", "Latitude"),
                FieldSpec("lng", "float", "Longitude"),
                FieldSpec("zoom", "int", "Zoom"),
                FieldSpec("height", "int", "Height (px)"),
            ),
            rules=(MODE_RULE, _map_coordinates, _int_range("zoom", 1, 20), _int_range("height", 1)),
        ),
        SectionSchema(
            type=SectionType.DIVIDER,
            label_en="Divider", label_ne="विभाजक",
            description="Visual separator line",
            anchor="divider",
            variants=("line", "dots", "space"),
            style={"padding": Padding.SMALL},
            fields=(
                _choice("thickness", "Thickness", (1, 2, 4)),
                _choice("color", "Color", DESIGN_TOKENS),
                _choice("width", "Width", ("full", "half", "third")),
            ),
            rules=(_one_of("thickness", (1, 2, 4)), _one_of("width", ("full", "half", "third"))),
        ),
        SectionSchema(
            type=SectionType.BUTTON,
            label_en="Button", label_ne="बटन",
            description="Standalone CTA button",
            anchor="button",
            variants=("row", "stack", "spread"),
            style={"padding": Padding.SMALL},
            fields=(
                _choice("size", "Size", ("sm", "md", "lg")),
                _choice("alignment", "Alignment", ("left", "center", "right")),
                _choice("gap", "Gap", ("sm", "md", "lg")),
                _list(
                    "buttons", "Buttons",
                    *_localized("label", "Label"),
                    FieldSpec("href", "url", "Link"),
                    _bool("open_in_new_tab", "Open in new tab"),
                    _choice("color", "Color", DESIGN_TOKENS),
                    _choice("style", "Style", ("solid", "outline", "pill")),
                ),
            ),
            rules=(_required_items("buttons", "label_en", "href", min_items=1),),
        ),
        SectionSchema(
            type=SectionType.IMAGE,
            label_en="Image", label_ne="तस्बिर",
            description="Standalone image display",
            anchor="image",
            variants=("standard", "rounded", "shadow"),
            fields=(
                FieldSpec("src", "image", "Image"),
                *_localized("alt", "Alt text"),
                *_localized("caption", "Caption"),
                FieldSpec("href", "url", "Link"),
            ),
            rules=(_required("src"),),
        ),
    )
}


def schema_for(section_type: SectionType | str) -> SectionSchema:
    return SCHEMAS[SectionType.coerce(section_type)]


def default_style(section_type: SectionType | str) -> StyleProps:
    overrides = schema_for(section_type).style
    return StyleProps(**overrides)


def get_defaults(section_type: SectionType | str) -> Section:
    """Fresh section of ``section_type`` with registry defaults. ``order`` is left unset."""
    schema = schema_for(section_type)
    section_id = new_id()
    anchor = schema.anchor
    # Repeatable block types get a unique anchor suffix.
    if schema.type in (SectionType.TEXT, SectionType.DIVIDER, SectionType.BUTTON, SectionType.IMAGE):
        anchor = f"{anchor}-{section_id[-4:]}"
    return Section(
        id=section_id,
        type=schema.type,
        order=None,
        visible=True,
        anchor_id=anchor,
        style=default_style(schema.type),
        content=schema.content_class(),
    )


def validate(section_type: SectionType | str, content: Content) -> List[FieldError]:
    """
    Check required sub-fields for ``section_type``.

    Returns a list of field-level errors (empty when valid). Raises
    ``SchemaError`` only for an unknown type or a content payload of the wrong
    variant.
    """
    schema = schema_for(section_type)
    if not isinstance(content, schema.content_class):
        raise SchemaError(
            f"{schema.type.value} expects {schema.content_class.__name__}, "
            f"got {type(content).__name__}"
        )

    errors: List[FieldError] = []
    if content.variant not in schema.variants:
        errors.append(FieldError("variant", f"Must be one of {', '.join(schema.variants)}"))
    for rule in schema.rules:
        errors.extend(rule(content))
    return errors


def field_set(section_type: SectionType | str) -> Tuple[FieldSpec, ...]:
    schema = schema_for(section_type)
    return (_choice("variant", "Variant", schema.variants), *schema.fields)


def new_list_item(section_type: SectionType | str, list_name: str, **values: Any) -> Item:
    item_cls = schema_for(section_type).list_item_class(list_name)
    return item_cls.from_dict(values)


__all__ = [
    "FieldSpec",
    "SectionSchema",
    "SCHEMAS",
    "schema_for",
    "default_style",
    "get_defaults",
    "validate",
    "field_set",
    "new_list_item",
]
