from apps.common.repository import GenericRepository
from .models import User


class UserRepository(GenericRepository[User]):
    """Read-only access to accounts; users are managed elsewhere."""

    def __init__(self):
        super().__init__(User)
