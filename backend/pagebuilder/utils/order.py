def compact_order(items, order_field="order", start=0):
    """
    Re-assigns sequential order values (start..start+N-1) following list position.
    """
    for index, item in enumerate(items, start=start):
        setattr(item, order_field, index)

    return items
