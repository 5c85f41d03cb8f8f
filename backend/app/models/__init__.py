from app.models.user import User, Role
from app.models.medicine import Medicine

__all__ = ["User", "Role", "Medicine"]
