"""
Load sample restaurants for local development.

Usage: python seed.py
Existing restaurants of the sample owner are replaced.
"""

import sys
from sqlalchemy.orm import Session
from digital_menu.core.config import settings
from digital_menu.core.database import Database
from digital_menu.models.category import Category
from digital_menu.models.dish import Dish, DishCategory
from digital_menu.models.restaurant import Restaurant
from digital_menu.models.user import User

SAMPLE_OWNER = {"email": "admin@restaurant.com", "name": "Admin User", "country": "India"}

SAMPLE_DATA = [
    {
        "name": "Agnes Restaurant",
        "location": "Mumbai, India",
        "categories": {
            "Starters": [
                {"name": "Paneer Tikka", "description": "Grilled cottage cheese marinated in spices", "price": 250, "spice_level": 2},
                {"name": "Chicken Wings", "description": "Spicy fried chicken wings", "price": 320, "spice_level": 4, "is_vegetarian": False},
            ],
            "Main Course": [
                {"name": "Butter Chicken", "description": "Creamy tomato-based curry with tender chicken", "price": 450, "spice_level": 2, "is_vegetarian": False},
                {"name": "Dal Makhani", "description": "Creamy black lentils cooked overnight", "price": 280, "spice_level": 1},
            ],
            "Desserts": [
                {"name": "Gulab Jamun", "description": "Sweet milk dumplings in rose syrup", "price": 120, "spice_level": 0},
            ],
        },
    },
    {
        "name": "Spice Garden",
        "location": "Delhi, India",
        "categories": {
            "Appetizers": [
                {"name": "Samosa", "description": "Crispy pastry filled with spiced potatoes", "price": 60, "spice_level": 2},
            ],
            "Breads": [
                {"name": "Naan", "description": "Soft leavened flatbread", "price": 50, "spice_level": 0},
                {"name": "Garlic Naan", "description": "Naan topped with garlic and butter", "price": 80, "spice_level": 1},
            ],
        },
    },
]


def seed(db: Session) -> User:
    owner = db.query(User).filter(User.email == SAMPLE_OWNER["email"]).first()
    if not owner:
        owner = User(**SAMPLE_OWNER)
        db.add(owner)
        db.flush()
        print(f"✅ Created user: {owner.email}")
    else:
        print(f"✅ Using existing user: {owner.email}")

    for restaurant in list(owner.restaurants):
        db.delete(restaurant)
    db.flush()

    for restaurant_data in SAMPLE_DATA:
        restaurant = Restaurant(
            name=restaurant_data["name"],
            location=restaurant_data["location"],
            user_id=owner.id
        )
        db.add(restaurant)
        print(f"  ✅ Created restaurant: {restaurant.name}")

        for category_name, dishes in restaurant_data["categories"].items():
            category = Category(name=category_name)
            restaurant.categories.append(category)
            for dish_data in dishes:
                dish = Dish(**dish_data)
                restaurant.dishes.append(dish)
                dish.category_links.append(DishCategory(category=category))
            print(f"    ✅ {category_name}: {len(dishes)} dishes")

    db.commit()
    return owner


if __name__ == "__main__":
    database = Database(settings.DATABASE_URL)
    database.init_db()
    db = database.session()

    try:
        print("🌱 Seeding database...")
        seed(db)
        print("🎉 Done")
    except Exception as e:
        print(f"❌ Seeding failed: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()
        database.dispose()
