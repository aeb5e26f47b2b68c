"""Category tree policies."""

from collections.abc import Callable


def would_create_cycle(
    category_id: str | None,
    new_parent_id: str | None,
    parent_of: Callable[[str], str | None],
) -> bool:
    """Return True when attaching a category to a parent creates a cycle.

    Walks the ancestors of the new parent iteratively. A walk that reaches
    the category itself, or revisits a node of an already corrupt tree, is a
    cycle.

    Args:
        category_id: Category being moved, None for a new category.
        new_parent_id: Prospective parent id.
        parent_of: Lookup returning the parent id of a category.

    Returns:
        bool: True if the assignment must be rejected.
    """
    visited: set[str] = set()
    node = new_parent_id
    while node is not None:
        if node == category_id or node in visited:
            return True
        visited.add(node)
        node = parent_of(node)
    return False


__all__ = ["would_create_cycle"]
