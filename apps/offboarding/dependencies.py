"""Cycle detection for self-referencing dependency edges."""


def would_create_cycle(node, parent_id, field_name):
    """
    True when pointing ``node.<field_name>`` at ``parent_id`` closes a loop.

    Walks the ancestor chain of the proposed parent through the stored edges;
    revisiting ``node`` (or any ancestor twice) means a cycle.
    """
    model = type(node)
    attname = model._meta.get_field(field_name).attname
    current = parent_id
    seen = set()
    while current is not None:
        if node.pk is not None and current == node.pk:
            return True
        if current in seen:
            return True
        seen.add(current)
        current = (
            model._default_manager.filter(pk=current)
            .values_list(attname, flat=True)
            .first()
        )
    return False
