from sqlalchemy import Column, String, Text, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from digital_menu.core.database import Base, utcnow
import uuid

class Dish(Base):
    __tablename__ = "dishes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(1024), nullable=True)  # URL only
    price = Column(Float, nullable=True)
    spice_level = Column(Integer, nullable=True)  # 0-5
    is_vegetarian = Column(Boolean, nullable=False, default=True)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="dishes")
    category_links = relationship("DishCategory", back_populates="dish", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def categories(self):
        return [link.category for link in self.category_links]


class DishCategory(Base):
    __tablename__ = "dish_categories"
    __table_args__ = (
        UniqueConstraint("dish_id", "category_id", name="uq_dish_categories_dish_category"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    dish_id = Column(String(36), ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    dish = relationship("Dish", back_populates="category_links")
    category = relationship("Category", back_populates="dish_links")
