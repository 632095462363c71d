"""
Response schemas shared by the menu routers, and their ORM converters.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from digital_menu.models.category import Category
from digital_menu.models.dish import Dish
from digital_menu.models.restaurant import Restaurant


class RestaurantItem(BaseModel):
    id: str
    name: str
    location: str
    userId: str
    createdAt: datetime
    updatedAt: datetime


class CategoryItem(BaseModel):
    id: str
    name: str
    restaurantId: str
    createdAt: datetime
    updatedAt: datetime


class DishItem(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None
    spiceLevel: Optional[int] = None
    isVegetarian: bool
    restaurantId: str
    createdAt: datetime
    updatedAt: datetime
    categories: List[CategoryItem] = Field(default_factory=list)


class RestaurantDetail(RestaurantItem):
    """Owner view: categories by name, dishes newest first"""

    categories: List[CategoryItem]
    dishes: List[DishItem]


class RestaurantPage(BaseModel):
    items: List[RestaurantItem]
    nextCursor: Optional[str] = None


class CategoryPage(BaseModel):
    items: List[CategoryItem]
    nextCursor: Optional[str] = None


class DishPage(BaseModel):
    items: List[DishItem]
    nextCursor: Optional[str] = None


class MenuDish(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None
    spiceLevel: Optional[int] = None
    isVegetarian: bool


class MenuCategory(BaseModel):
    id: str
    name: str
    dishes: List[MenuDish]


class PublicMenu(BaseModel):
    """What a customer sees through the shared link or QR code."""

    id: str
    name: str
    location: str
    categories: List[MenuCategory]


class SuccessResponse(BaseModel):
    success: bool = True


def restaurant_item(restaurant: Restaurant) -> RestaurantItem:
    return RestaurantItem(
        id=restaurant.id,
        name=restaurant.name,
        location=restaurant.location,
        userId=restaurant.user_id,
        createdAt=restaurant.created_at,
        updatedAt=restaurant.updated_at
    )


def category_item(category: Category) -> CategoryItem:
    return CategoryItem(
        id=category.id,
        name=category.name,
        restaurantId=category.restaurant_id,
        createdAt=category.created_at,
        updatedAt=category.updated_at
    )


def dish_item(dish: Dish, with_categories: bool = True) -> DishItem:
    categories = []
    if with_categories:
        categories = [category_item(c) for c in sorted(dish.categories, key=lambda c: c.name)]

    return DishItem(
        id=dish.id,
        name=dish.name,
        description=dish.description,
        image=dish.image,
        price=dish.price,
        spiceLevel=dish.spice_level,
        isVegetarian=dish.is_vegetarian,
        restaurantId=dish.restaurant_id,
        createdAt=dish.created_at,
        updatedAt=dish.updated_at,
        categories=categories
    )


def menu_dish(dish: Dish) -> MenuDish:
    return MenuDish(
        id=dish.id,
        name=dish.name,
        description=dish.description,
        image=dish.image,
        price=dish.price,
        spiceLevel=dish.spice_level,
        isVegetarian=dish.is_vegetarian
    )
