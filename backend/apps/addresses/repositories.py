from typing import Any, Optional

from apps.common.repository import GenericRepository
from .models import Address


class AddressRepository(GenericRepository[Address]):
    def __init__(self):
        super().__init__(Address)

    def list_for_user(self, user_id: Any):
        return list(self.model.objects.filter(user_id=user_id))

    def get_with_user(self, pk: Any) -> Optional[Address]:
        return self.model.objects.select_related("user").filter(pk=pk).first()
