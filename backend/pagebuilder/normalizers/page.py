from .section import normalize_section

def normalize_page(page, admin=False):
    sections = sorted(page.sections, key=lambda s: s.order)

    return {
        "id": page.id,
        "slug": page.slug,
        "title_en": page.title_en,
        "title_ne": page.title_ne,
        "enabled": page.enabled if admin else None,
        "sections": [
            normalize_section(s, admin=admin)
            for s in sections
            if admin or s.visible
        ]
    }
