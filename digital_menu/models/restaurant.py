from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from digital_menu.core.database import Base, utcnow
import uuid

class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="restaurants")
    categories = relationship("Category", back_populates="restaurant", cascade="all, delete-orphan", passive_deletes=True)
    dishes = relationship("Dish", back_populates="restaurant", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Restaurant(id={self.id}, name={self.name}, user_id={self.user_id})>"
