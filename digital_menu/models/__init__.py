from .user import User
from .session import UserSession
from .verification_code import VerificationCode
from .restaurant import Restaurant
from .category import Category
from .dish import Dish, DishCategory

__all__ = [
    "User",
    "UserSession",
    "VerificationCode",
    "Restaurant",
    "Category",
    "Dish",
    "DishCategory",
]
