"""Derived views over grocery items: department and store grouping."""
from __future__ import annotations
from collections import defaultdict
from typing import Iterable, Sequence
from meal_plan_wizard.constants import DEFAULT_DEPARTMENT, DEPARTMENT_ORDER, NO_STORE
from meal_plan_wizard.models import GroceryItemDraft, StoreInfo

DepartmentGroups = list[tuple[str, list[GroceryItemDraft]]]


def department_sort_index(department: str | None, order: Sequence[str] = DEPARTMENT_ORDER) -> int:
    if not department or department not in order:
        return len(order)
    return order.index(department)


def _department_key(order: Sequence[str]):
    return lambda dept: (department_sort_index(dept, order), dept)


def group_by_department(
    items: Iterable[GroceryItemDraft],
    department_order: Sequence[str] | None = None,
) -> DepartmentGroups:
    """Group items by department in store-walk order.

    Departments follow ``department_order`` (the standard order when none is
    given); departments outside it come last, alphabetically. Items within
    a department are alphabetical by name.
    """
    order = department_order or DEPARTMENT_ORDER
    by_department: dict[str, list[GroceryItemDraft]] = defaultdict(list)
    for item in items:
        by_department[item.department or DEFAULT_DEPARTMENT].append(item)

    return [
        (dept, sorted(by_department[dept], key=lambda i: i.ingredient_name.lower()))
        for dept in sorted(by_department, key=_department_key(order))
    ]


def group_by_store_and_department(
    items: Iterable[GroceryItemDraft],
    stores: Sequence[StoreInfo] = (),
) -> list[tuple[str, DepartmentGroups]]:
    """Group items by store, then by department within each store.

    Stores keep the order they are given in, stores not in that list follow
    alphabetically, and items with no store form the last group. Each store
    may override the department order.
    """
    store_rank = {s.name: i for i, s in enumerate(stores)}
    store_orders = {s.name: s.department_order for s in stores if s.department_order}

    by_store: dict[str, list[GroceryItemDraft]] = defaultdict(list)
    for item in items:
        by_store[item.store_name or NO_STORE].append(item)

    def store_key(name: str) -> tuple[int, int, str]:
        if name == NO_STORE:
            return (2, 0, name)
        if name in store_rank:
            return (0, store_rank[name], name)
        return (1, 0, name)

    return [
        (name, group_by_department(by_store[name], store_orders.get(name)))
        for name in sorted(by_store, key=store_key)
    ]


def unchecked_count(items: Iterable[GroceryItemDraft]) -> int:
    return sum(1 for item in items if not item.checked)


def quantity_label(item: GroceryItemDraft) -> str:
    return f"{item.total_quantity} {item.unit}".strip()


def format_grocery_list(
    items: Iterable[GroceryItemDraft],
    department_order: Sequence[str] | None = None,
) -> str:
    lines: list[str] = []
    for department, dept_items in group_by_department(items, department_order):
        lines.append(f"\n{department}")
        lines.append("-" * len(department))
        for item in dept_items:
            lines.append(f"[ ] {quantity_label(item)} {item.ingredient_name}")

    return "\n".join(lines).strip()
