"""Built-in failure categories."""

from __future__ import annotations

from enum import Enum


class FailureCategory(Enum):
    """Failure categories with a dedicated base probability.

    Host-defined ("custom") categories are plain strings looked up in an
    open mapping instead.
    """

    ALLOCATOR = "allocator"
    FILESYSTEM = "filesystem"
    NETWORK = "network"


def category_label(category: FailureCategory | str) -> str:
    if isinstance(category, FailureCategory):
        return category.value
    return category


def resolve_category(category: FailureCategory | str) -> FailureCategory | str:
    """Map built-in category names to their enum member.

    ``"network"`` and ``FailureCategory.NETWORK`` name the same category
    everywhere a category is accepted; any other string is a custom name.
    """
    if isinstance(category, FailureCategory):
        return category
    try:
        return FailureCategory(category)
    except ValueError:
        return category


def is_builtin_label(name: str) -> bool:
    return any(name == member.value for member in FailureCategory)
