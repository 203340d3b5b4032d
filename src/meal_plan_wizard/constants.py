from __future__ import annotations
from types import MappingProxyType
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# date.weekday() value of the day every planning week starts on
ANCHOR_WEEKDAY = 5

DAY_NAMES = ("Saturday", "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
DAY_NAMES_SHORT = ("Sat", "Sun", "Mon", "Tue", "Wed", "Thu", "Fri")

DEPARTMENT_ORDER = (
    "Produce",
    "Meat & Seafood",
    "Dairy",
    "Bakery",
    "Frozen",
    "Pantry",
    "Canned Goods",
    "Condiments",
    "Spices",
    "Beverages",
    "Snacks",
    "Other",
)
DEFAULT_DEPARTMENT = "Other"
NO_STORE = "No Store Assigned"

TIME_RATING_LABELS = MappingProxyType({
    1: "Very Quick",
    2: "Quick",
    3: "Medium",
    4: "Long",
    5: "Very Long",
})

RECIPE_CATEGORIES = ("entree", "side", "dessert", "appetizer", "breakfast", "soup", "salad", "beverage")
RECIPE_STATUSES = ("active", "wishlist", "archived")

TIMEZONE_OPTIONS = MappingProxyType({
    "US & Canada": (
        ("America/New_York", "Eastern Time (ET)"),
        ("America/Chicago", "Central Time (CT)"),
        ("America/Denver", "Mountain Time (MT)"),
        ("America/Phoenix", "Arizona (MST)"),
        ("America/Los_Angeles", "Pacific Time (PT)"),
        ("America/Anchorage", "Alaska Time"),
        ("Pacific/Honolulu", "Hawaii Time"),
    ),
    "Europe": (
        ("Europe/London", "London (GMT/BST)"),
        ("Europe/Paris", "Paris (CET)"),
        ("Europe/Berlin", "Berlin (CET)"),
        ("Europe/Amsterdam", "Amsterdam (CET)"),
        ("Europe/Rome", "Rome (CET)"),
        ("Europe/Madrid", "Madrid (CET)"),
    ),
    "Asia & Pacific": (
        ("Asia/Tokyo", "Tokyo (JST)"),
        ("Asia/Shanghai", "Shanghai (CST)"),
        ("Asia/Hong_Kong", "Hong Kong (HKT)"),
        ("Asia/Singapore", "Singapore (SGT)"),
        ("Asia/Seoul", "Seoul (KST)"),
        ("Australia/Sydney", "Sydney (AEST)"),
        ("Australia/Melbourne", "Melbourne (AEST)"),
        ("Pacific/Auckland", "Auckland (NZST)"),
    ),
    "Other": (("UTC", "UTC"),),
})


def time_rating_label(rating: int | None) -> str:
    return TIME_RATING_LABELS.get(rating, "Unknown") if rating is not None else "Unknown"


def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True
