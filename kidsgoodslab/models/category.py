"""Category names and colors shared by every job."""

from dataclasses import dataclass

CATEGORY_NAMES: dict[str, str] = {
    "toy": "おもちゃ",
    "baby": "ベビー用品",
    "educational": "知育玩具",
    "consumable": "消耗品",
    "outdoor": "外遊び",
    "furniture": "家具・収納",
    "safety": "安全グッズ",
    "food": "食品",
}

CATEGORY_KEYS: dict[str, str] = {name: key for key, name in CATEGORY_NAMES.items()}

DEFAULT_CATEGORY = "baby"


@dataclass(frozen=True)
class CategoryColor:
    """OGP palette for a category."""

    bg: str
    accent: str


CATEGORY_COLORS: dict[str, CategoryColor] = {
    "consumable": CategoryColor("#fff3e0", "#ff9800"),   # Orange
    "food": CategoryColor("#e8f5e9", "#4caf50"),         # Green
    "baby": CategoryColor("#e3f2fd", "#2196f3"),         # Blue
    "furniture": CategoryColor("#fce4ec", "#e91e63"),    # Pink
    "educational": CategoryColor("#fff8e1", "#ffc107"),  # Yellow
    "outdoor": CategoryColor("#e0f7fa", "#00bcd4"),      # Cyan
    "safety": CategoryColor("#f3e5f5", "#9c27b0"),       # Purple
}

WHITE = "#ffffff"
DARK = "#2d3436"
GRAY = "#636e72"


def category_name(key: str | None) -> str:
    """English key -> Japanese display name. Unknown keys pass through."""
    if not key:
        return CATEGORY_NAMES[DEFAULT_CATEGORY]
    return CATEGORY_NAMES.get(key, key)


def category_key(name: str | None) -> str:
    """Japanese display name (or an English key) -> English key."""
    if not name:
        return DEFAULT_CATEGORY
    name = name.strip()
    if name in CATEGORY_NAMES:
        return name
    return CATEGORY_KEYS.get(name, DEFAULT_CATEGORY)


def category_color(key: str | None) -> CategoryColor:
    return CATEGORY_COLORS.get(key or "", CATEGORY_COLORS[DEFAULT_CATEGORY])
