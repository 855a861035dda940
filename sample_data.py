"""Default mall catalog used to seed an empty store and as the offline client dataset."""

import copy

CATEGORIES = [
    {"id": 1, "name": "Fashion & Apparel", "description": "Clothing, accessories, and footwear", "icon": "👗"},
    {"id": 2, "name": "Electronics", "description": "Latest gadgets and technology", "icon": "📱"},
    {"id": 3, "name": "Food & Beverages", "description": "Restaurants and food courts", "icon": "🍽️"},
    {"id": 4, "name": "Home & Lifestyle", "description": "Furniture and home decor", "icon": "🏠"},
    {"id": 5, "name": "Beauty & Cosmetics", "description": "Skincare and makeup products", "icon": "💄"},
    {"id": 6, "name": "Sports & Fitness", "description": "Sportswear and equipment", "icon": "⚽"},
]

FLOORS = [
    {"id": 1, "number": 1, "name": "Ground Floor", "description": "Fashion & Accessories"},
    {"id": 2, "number": 2, "name": "First Floor", "description": "Electronics & Technology"},
    {"id": 3, "number": 3, "name": "Second Floor", "description": "Food Court & Restaurants"},
    {"id": 4, "number": 4, "name": "Third Floor", "description": "Home & Lifestyle"},
    {"id": 5, "number": 5, "name": "Fourth Floor", "description": "Entertainment & Cinema"},
]


def _shop(id, name, category, floor, shop_number, description, mailbox, hours="10:00 AM - 9:00 PM"):
    return {
        "id": id,
        "name": name,
        "category": category,
        "floor": floor,
        "shopNumber": shop_number,
        "description": description,
        "contact": f"+91 98765 {43209 + id}",
        "email": f"{mailbox}@luxeplaza.com",
        "hours": hours,
    }


SHOPS = [
    _shop(1, "Zara", 1, 1, "G-101", "International fashion retailer", "zara"),
    _shop(2, "H&M", 1, 1, "G-105", "Swedish fashion brand", "hm"),
    _shop(3, "Apple Store", 2, 2, "F1-201", "Official Apple retailer", "apple"),
    _shop(4, "Samsung Experience", 2, 2, "F1-205", "Samsung products showcase", "samsung"),
    _shop(5, "Starbucks", 3, 3, "F2-301", "Coffee and snacks", "starbucks", "8:00 AM - 10:00 PM"),
    _shop(6, "McDonald's", 3, 3, "F2-310", "Fast food restaurant", "mcdonalds", "10:00 AM - 11:00 PM"),
    _shop(7, "IKEA", 4, 4, "F3-401", "Furniture and home accessories", "ikea"),
    _shop(8, "Sephora", 5, 1, "G-120", "Beauty and cosmetics", "sephora"),
    _shop(9, "Nike", 6, 1, "G-115", "Sportswear and equipment", "nike"),
    _shop(10, "Adidas", 6, 1, "G-118", "Sports apparel and footwear", "adidas"),
]

OFFERS = [
    {"id": 1, "title": "Summer Sale", "shopId": 1, "discount": 50, "description": "Up to 50% off on all summer collections", "validFrom": "2026-01-20", "validUntil": "2026-02-28"},
    {"id": 2, "title": "New Year Offer", "shopId": 2, "discount": 40, "description": "40% discount on selected items", "validFrom": "2026-01-15", "validUntil": "2026-02-15"},
    {"id": 3, "title": "Tech Bonanza", "shopId": 3, "discount": 15, "description": "Special discounts on latest Apple products", "validFrom": "2026-01-25", "validUntil": "2026-02-10"},
    {"id": 4, "title": "Galaxy Days", "shopId": 4, "discount": 25, "description": "25% off on Samsung Galaxy series", "validFrom": "2026-01-20", "validUntil": "2026-03-01"},
    {"id": 5, "title": "Coffee Club", "shopId": 5, "discount": 10, "description": "Buy 2 get 1 free on all beverages", "validFrom": "2026-01-01", "validUntil": "2026-12-31"},
    {"id": 6, "title": "Happy Meal Deal", "shopId": 6, "discount": 20, "description": "20% off on combo meals", "validFrom": "2026-01-15", "validUntil": "2026-02-28"},
    {"id": 7, "title": "Home Makeover", "shopId": 7, "discount": 30, "description": "30% off on furniture collection", "validFrom": "2026-01-20", "validUntil": "2026-03-15"},
    {"id": 8, "title": "Beauty Festival", "shopId": 8, "discount": 35, "description": "Flat 35% off on makeup products", "validFrom": "2026-01-25", "validUntil": "2026-02-25"},
]


def default_catalog():
    """Fresh deep copy of the four catalog collections."""
    return {
        "shops": copy.deepcopy(SHOPS),
        "offers": copy.deepcopy(OFFERS),
        "categories": copy.deepcopy(CATEGORIES),
        "floors": copy.deepcopy(FLOORS),
    }
