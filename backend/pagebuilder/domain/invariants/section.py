from .exceptions import InvariantViolation


def assert_section_order(sections):
    orders = [section.order for section in sections]
    if not orders:
        return

    expected = list(range(len(orders)))
    if orders != expected:
        raise InvariantViolation(
            f"Section orders are not consecutive starting from 0: {orders}"
        )


def assert_unique_section_ids(sections):
    ids = [section.id for section in sections]
    if len(set(ids)) != len(ids):
        raise InvariantViolation(f"Duplicate section ids: {ids}")


def assert_section(section):
    if section.content is None:
        raise InvariantViolation(f"Section {section.id} has no content.")

    if section.order is None or section.order < 0:
        raise InvariantViolation(f"Section {section.id} has no valid order.")
