def normalize_section(section, admin=False):
    data = {
        "id": section.id,
        "type": section.type.value,
        "order": section.order,
        "anchor_id": section.anchor_id,
        "style": section.style.to_dict(),
        "content": section.content.to_dict(),
    }

    if admin:
        data["visible"] = section.visible

    return data
