from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from digital_menu.core.database import get_db
from digital_menu.core.security import require_user_id
from digital_menu.models.dish import Dish, DishCategory
from digital_menu.schemas import DishItem, DishPage, SuccessResponse, dish_item
from digital_menu.services.ownership import (
    get_owned_dish,
    get_owned_restaurant,
    get_restaurant_categories,
)
from digital_menu.services.pagination import paginate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dishes", tags=["Dishes"])

# Pydantic Models
class CreateDishRequest(BaseModel):
    restaurantId: str
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=1024)
    price: Optional[float] = None
    spiceLevel: Optional[int] = Field(None, ge=0, le=5)
    isVegetarian: bool = True
    categoryIds: Optional[List[str]] = None

class UpdateDishRequest(BaseModel):
    """Fields left out are untouched; explicit nulls clear optional fields."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=1024)
    price: Optional[float] = None
    spiceLevel: Optional[int] = Field(None, ge=0, le=5)
    isVegetarian: Optional[bool] = None
    categoryIds: Optional[List[str]] = None


# Request field -> column for the nullable dish attributes
NULLABLE_FIELDS = {
    "description": "description",
    "image": "image",
    "price": "price",
    "spiceLevel": "spice_level",
}


@router.post("", response_model=DishItem, status_code=status.HTTP_201_CREATED)
async def create_dish(
    request: CreateDishRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    restaurant = get_owned_restaurant(db, request.restaurantId, user_id)
    categories = get_restaurant_categories(db, restaurant.id, request.categoryIds or [])

    dish = Dish(
        name=request.name,
        description=request.description,
        image=request.image,
        price=request.price,
        spice_level=request.spiceLevel,
        is_vegetarian=request.isVegetarian,
        restaurant_id=restaurant.id
    )
    dish.category_links = [DishCategory(category=c) for c in categories]

    db.add(dish)
    db.commit()
    db.refresh(dish)

    logger.info(f"Created dish {dish.id} in restaurant {restaurant.id}")
    return dish_item(dish)


@router.get("", response_model=DishPage)
async def list_dishes(
    restaurantId: str = Query(..., description="Restaurant to list"),
    limit: int = Query(6, ge=1, le=50, description="Items per page"),
    cursor: Optional[str] = Query(None, description="Id of the first item of the page"),
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    """
    List a restaurant's dishes, newest first, with their categories
    """
    restaurant = get_owned_restaurant(db, restaurantId, user_id)

    query = db.query(Dish).filter(Dish.restaurant_id == restaurant.id)
    items, next_cursor = paginate(query, Dish, Dish.created_at, limit, cursor, descending=True)

    return DishPage(
        items=[dish_item(d) for d in items],
        nextCursor=next_cursor
    )


@router.patch("/{dish_id}", response_model=DishItem)
async def update_dish(
    dish_id: str,
    request: UpdateDishRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    dish = get_owned_dish(db, dish_id, user_id)
    data = request.model_dump(exclude_unset=True)

    # Validate before touching anything so a bad category list changes nothing
    categories = None
    if data.get("categoryIds") is not None:
        categories = get_restaurant_categories(db, dish.restaurant_id, data["categoryIds"])

    if data.get("name") is not None:
        dish.name = data["name"]
    if data.get("isVegetarian") is not None:
        dish.is_vegetarian = data["isVegetarian"]
    for field, column in NULLABLE_FIELDS.items():
        if field in data:
            setattr(dish, column, data[field])

    if categories is not None:
        dish.category_links.clear()
        db.flush()
        dish.category_links.extend(DishCategory(category=c) for c in categories)

    db.commit()
    db.refresh(dish)

    return dish_item(dish)


@router.delete("/{dish_id}", response_model=SuccessResponse)
async def delete_dish(
    dish_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    dish = get_owned_dish(db, dish_id, user_id)

    db.delete(dish)
    db.commit()

    return SuccessResponse(success=True)
