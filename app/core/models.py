# Import all models here to ensure SQLAlchemy can set up relationships correctly
from app.api.users.models import User
from app.api.validator.models import CheckEvent

# Re-export all models
__all__ = [
    'CheckEvent',
    'User',
]
