from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional
from digital_menu.core.database import get_db
from digital_menu.core.security import require_user_id
from digital_menu.models.category import Category
from digital_menu.schemas import CategoryItem, CategoryPage, SuccessResponse, category_item
from digital_menu.services.ownership import get_owned_category, get_owned_restaurant
from digital_menu.services.pagination import paginate

router = APIRouter(prefix="/api/categories", tags=["Categories"])

# Pydantic Models
class CreateCategoryRequest(BaseModel):
    restaurantId: str
    name: str = Field(..., min_length=1, max_length=255)

class UpdateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


@router.post("", response_model=CategoryItem, status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CreateCategoryRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    restaurant = get_owned_restaurant(db, request.restaurantId, user_id)

    category = Category(name=request.name, restaurant_id=restaurant.id)
    db.add(category)
    db.commit()
    db.refresh(category)

    return category_item(category)


@router.get("", response_model=CategoryPage)
async def list_categories(
    restaurantId: str = Query(..., description="Restaurant to list"),
    limit: int = Query(6, ge=1, le=50, description="Items per page"),
    cursor: Optional[str] = Query(None, description="Id of the first item of the page"),
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    """
    List a restaurant's categories by name
    """
    restaurant = get_owned_restaurant(db, restaurantId, user_id)

    query = db.query(Category).filter(Category.restaurant_id == restaurant.id)
    items, next_cursor = paginate(query, Category, Category.name, limit, cursor)

    return CategoryPage(
        items=[category_item(c) for c in items],
        nextCursor=next_cursor
    )


@router.patch("/{category_id}", response_model=CategoryItem)
async def update_category(
    category_id: str,
    request: UpdateCategoryRequest,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    category = get_owned_category(db, category_id, user_id)

    category.name = request.name
    db.commit()
    db.refresh(category)

    return category_item(category)


@router.delete("/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db)
):
    category = get_owned_category(db, category_id, user_id)

    db.delete(category)
    db.commit()

    return SuccessResponse(success=True)
