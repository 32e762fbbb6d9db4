"""Closed classification vocabularies for apparel products."""

from enum import Enum


class Category(Enum):
    CLOTHING = "Clothing"
    FOOTWEAR = "Footwear"
    ACCESSORIES = "Accessories"
    OUTERWEAR = "Outerwear"


class Gender(Enum):
    MEN = "Men"
    WOMEN = "Women"


class AgeGroup(Enum):
    CHILD = "Child"
    TEEN = "Teen"
    ADULT = "Adult"


class Season(Enum):
    WINTER = "Winter"
    SUMMER = "Summer"
    BOTH = "Both"


SUBCATEGORIES = {
    Category.CLOTHING.value: [
        "Shirt",
        "Pants",
        "Dress",
        "Skirt",
        "Sweater",
        "T-Shirt",
        "Shorts",
        "Thobe",
        "Hoodies",
    ],
    Category.FOOTWEAR.value: ["Sneakers", "Boots", "Sandals", "Dress Shoes", "Slippers"],
    Category.ACCESSORIES.value: ["Hat", "Belt", "Scarf", "Gloves", "Sunglasses", "Bag", "Watch", "Cap"],
    Category.OUTERWEAR.value: ["Coat", "Parka", "Trench Coat", "Bomber Jacket", "Jacket", "Raincoat"],
}

CLOTHING_SIZES = ["XS", "S", "M", "L", "XL", "XXL", "XXXL"]


def uses_free_form_sizes(category: str) -> bool:
    """Footwear sizes (EU 42, US 9.5, ...) are not drawn from the clothing scale."""
    return category == Category.FOOTWEAR.value


def is_valid_size(category: str, size: str) -> bool:
    if not size or not size.strip():
        return False
    if uses_free_form_sizes(category):
        return True
    return size in CLOTHING_SIZES


def as_dict() -> dict:
    return {
        "categories": [c.value for c in Category],
        "subcategories": SUBCATEGORIES,
        "genders": [g.value for g in Gender],
        "ages": [a.value for a in AgeGroup],
        "seasons": [s.value for s in Season],
        "clothing_sizes": CLOTHING_SIZES,
    }
