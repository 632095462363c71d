from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional
from digital_menu.core.database import get_db
from digital_menu.core.errors import NotFound
from digital_menu.core.security import require_user_id
from digital_menu.models.category import Category
from digital_menu.models.dish import Dish
from digital_menu.models.restaurant import Restaurant
from digital_menu.schemas import (
    PublicMenu,
    MenuCategory,
    RestaurantDetail,
    RestaurantItem,
    RestaurantPage,
    SuccessResponse,
    category_item,
    dish_item,
    menu_dish,
    restaurant_item,
)
from digital_menu.services.ownership import get_owned_restaurant
from digital_menu.services.pagination import paginate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])

# Pydantic Models
class CreateRestaurantRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)

class UpdateRestaurantRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)


@router.post("", response_model=RestaurantItem, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    request: CreateRestaurantRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    restaurant = Restaurant(
        name=request.name,
        location=request.location,
        user_id=user_id
    )

    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)

    logger.info(f"User {user_id} created restaurant {restaurant.id}")
    return restaurant_item(restaurant)


@router.get("", response_model=RestaurantPage)
async def list_restaurants(
    limit: int = Query(6, ge=1, le=50, description="Items per page"),
    cursor: Optional[str] = Query(None, description="Id of the first item of the page"),
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    """
    List the caller's restaurants, newest first
    """
    query = db.query(Restaurant).filter(Restaurant.user_id == user_id)
    items, next_cursor = paginate(
        query, Restaurant, Restaurant.created_at, limit, cursor, descending=True
    )

    return RestaurantPage(
        items=[restaurant_item(r) for r in items],
        nextCursor=next_cursor
    )


@router.get("/{restaurant_id}", response_model=RestaurantDetail)
async def get_restaurant(
    restaurant_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    restaurant = get_owned_restaurant(db, restaurant_id, user_id)

    categories = db.query(Category).filter(
        Category.restaurant_id == restaurant.id
    ).order_by(Category.name.asc()).all()

    dishes = db.query(Dish).filter(
        Dish.restaurant_id == restaurant.id
    ).order_by(Dish.created_at.desc()).all()

    item = restaurant_item(restaurant)
    return RestaurantDetail(
        **item.model_dump(),
        categories=[category_item(c) for c in categories],
        dishes=[dish_item(d) for d in dishes]
    )


@router.patch("/{restaurant_id}", response_model=RestaurantItem)
async def update_restaurant(
    restaurant_id: str,
    request: UpdateRestaurantRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    restaurant = get_owned_restaurant(db, restaurant_id, user_id)

    if request.name is not None:
        restaurant.name = request.name
    if request.location is not None:
        restaurant.location = request.location

    db.commit()
    db.refresh(restaurant)

    return restaurant_item(restaurant)


@router.delete("/{restaurant_id}", response_model=SuccessResponse)
async def delete_restaurant(
    restaurant_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    restaurant = get_owned_restaurant(db, restaurant_id, user_id)

    db.delete(restaurant)
    db.commit()

    logger.info(f"User {user_id} deleted restaurant {restaurant_id}")
    return SuccessResponse(success=True)


@router.get("/{restaurant_id}/menu", response_model=PublicMenu)
async def get_public_menu(
    restaurant_id: str,
    db: Session = Depends(get_db)
):
    """
    Public menu for customers. No authentication.
    """
    restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()

    if not restaurant:
        raise NotFound("Restaurant not found")

    categories = db.query(Category).filter(
        Category.restaurant_id == restaurant.id
    ).order_by(Category.name.asc()).all()

    return PublicMenu(
        id=restaurant.id,
        name=restaurant.name,
        location=restaurant.location,
        categories=[
            MenuCategory(
                id=category.id,
                name=category.name,
                dishes=[
                    menu_dish(link.dish)
                    for link in sorted(category.dish_links, key=lambda link: link.created_at)
                ]
            )
            for category in categories
        ]
    )
