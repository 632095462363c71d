from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from digital_menu.core.database import Base, utcnow
import uuid

class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="categories")
    dish_links = relationship("DishCategory", back_populates="category", cascade="all, delete-orphan", passive_deletes=True)
