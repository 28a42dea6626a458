"""Keyword-based category suggestions for item names."""
from typing import Dict, Optional, Tuple

# Checked in this order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "produce": (
        "apple", "banana", "orange", "lettuce", "tomato", "carrot",
        "fruit", "vegetable",
    ),
    "dairy": ("milk", "cheese", "yogurt", "butter", "cream", "egg"),
    "meat": ("chicken", "beef", "pork", "fish", "turkey", "lamb", "meat"),
    "bakery": ("bread", "bagel", "croissant", "roll", "bun", "cake"),
    "pantry": ("pasta", "rice", "flour", "sugar", "salt", "pepper", "oil", "cereal"),
    "beverages": ("water", "juice", "soda", "coffee", "tea", "beer", "wine"),
    "frozen": ("ice cream", "frozen", "popsicle"),
    "snacks": ("chips", "crackers", "cookies", "candy", "nuts"),
    "household": ("paper towel", "toilet paper", "soap", "detergent", "cleaner"),
}

# Display names used when seeding the default categories
CATEGORY_NAMES: Dict[str, str] = {
    "produce": "Produce",
    "dairy": "Dairy & Eggs",
    "meat": "Meat & Seafood",
    "bakery": "Bakery",
    "pantry": "Pantry",
    "beverages": "Beverages",
    "frozen": "Frozen",
    "snacks": "Snacks",
    "household": "Household",
}


def classify(item_name: str) -> Optional[str]:
    """
    Suggest a category slug for an item name.

    Matching is case-insensitive substring containment, so "Ice cream" is
    filed under dairy ("cream") before frozen is ever considered.

    Args:
        item_name: Free-text item name

    Returns:
        Category slug, or None when no keyword matches
    """
    lowered = item_name.lower()
    for slug, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return slug
    return None
