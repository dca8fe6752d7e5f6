"""
Permission strings as values.

Formats:
    "<area>:<action>"                 StaticPermission  (e.g. "balance:view")
    "outputs:view_category:<NAME>"    CategoryView      (one expense category)
    "outputs:view_all_categories"     AllCategories     (every expense category)

Usage:
    perms = [parse_permission(p) for p in user_permissions]
    can_view_category(perms, "sueldos")
    visible_expenses(Expense.objects.all(), perms)
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from barfer.exceptions import BarferError

CATEGORY_PREFIX = "outputs:view_category:"
ALL_CATEGORIES = "outputs:view_all_categories"

_STATIC_RE = re.compile(r"^[a-z_]+:[a-z_]+$")


@dataclass(frozen=True)
class StaticPermission:
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class CategoryView:
    category: str

    def __post_init__(self):
        # Category names are compared upper-case
        object.__setattr__(self, "category", self.category.strip().upper())

    def __str__(self):
        return f"{CATEGORY_PREFIX}{self.category}"


@dataclass(frozen=True)
class AllCategories:
    def __str__(self):
        return ALL_CATEGORIES


Permission = StaticPermission | CategoryView | AllCategories


def parse_permission(value: str) -> Permission:
    """
    Parse a permission string.

    Raises:
        BarferError: INVALID_PERMISSION for malformed strings
    """
    if not isinstance(value, str) or not value.strip():
        raise BarferError("INVALID_PERMISSION", permission=value)
    value = value.strip()

    if value == ALL_CATEGORIES:
        return AllCategories()
    if value.startswith(CATEGORY_PREFIX):
        category = value[len(CATEGORY_PREFIX) :].strip()
        if not category:
            raise BarferError(
                "INVALID_PERMISSION",
                message="Category permission without a category name",
                permission=value,
            )
        return CategoryView(category)
    if _STATIC_RE.match(value):
        return StaticPermission(value)
    raise BarferError("INVALID_PERMISSION", permission=value)


def _parsed(permissions: Iterable) -> list[Permission]:
    return [parse_permission(p) if isinstance(p, str) else p for p in permissions]


def can_view_category(permissions: Iterable, category: str) -> bool:
    """True with AllCategories or a CategoryView for ``category`` (case-insensitive)."""
    wanted = (category or "").strip().upper()
    for permission in _parsed(permissions):
        if isinstance(permission, AllCategories):
            return True
        if isinstance(permission, CategoryView) and permission.category == wanted:
            return True
    return False


def visible_categories(permissions: Iterable, categories: Iterable[str]) -> list[str]:
    """Subset of ``categories`` the permissions allow, in input order."""
    permissions = _parsed(permissions)
    return [c for c in categories if can_view_category(permissions, c)]


def visible_expenses(queryset, permissions: Iterable):
    """Restrict an Expense queryset to the categories the permissions allow."""
    permissions = _parsed(permissions)
    if any(isinstance(p, AllCategories) for p in permissions):
        return queryset
    allowed = [p.category for p in permissions if isinstance(p, CategoryView)]
    return queryset.filter(category__in=allowed)
