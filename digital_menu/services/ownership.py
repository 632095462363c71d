"""
Ownership checks for menu resources.

Everything a user can change hangs off a Restaurant they own. A resource that
exists but belongs to someone else is reported as not found.
"""

from typing import List
from sqlalchemy.orm import Session
from digital_menu.core.errors import BadRequest, NotFound
from digital_menu.models.category import Category
from digital_menu.models.dish import Dish
from digital_menu.models.restaurant import Restaurant


def get_owned_restaurant(db: Session, restaurant_id: str, user_id: str) -> Restaurant:
    restaurant = db.query(Restaurant).filter(
        Restaurant.id == restaurant_id,
        Restaurant.user_id == user_id
    ).first()

    if not restaurant:
        raise NotFound("Restaurant not found")

    return restaurant


def get_owned_category(db: Session, category_id: str, user_id: str) -> Category:
    category = db.query(Category).join(Restaurant).filter(
        Category.id == category_id,
        Restaurant.user_id == user_id
    ).first()

    if not category:
        raise NotFound("Category not found")

    return category


def get_owned_dish(db: Session, dish_id: str, user_id: str) -> Dish:
    dish = db.query(Dish).join(Restaurant).filter(
        Dish.id == dish_id,
        Restaurant.user_id == user_id
    ).first()

    if not dish:
        raise NotFound("Dish not found")

    return dish


def get_restaurant_categories(db: Session, restaurant_id: str, category_ids: List[str]) -> List[Category]:
    """Load categories by id, all of which must belong to the restaurant"""
    unique_ids = list(dict.fromkeys(category_ids))
    if not unique_ids:
        return []

    categories = db.query(Category).filter(
        Category.id.in_(unique_ids),
        Category.restaurant_id == restaurant_id
    ).all()

    if len(categories) != len(unique_ids):
        raise BadRequest("Some categories do not belong to this restaurant")

    return categories
