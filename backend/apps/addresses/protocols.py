from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from apps.addresses.models import Address


class AddressRepositoryProtocol(Protocol):
    def create(self, **data) -> Optional["Address"]: ...

    def list_for_user(self, user_id: Any) -> Iterable["Address"]: ...

    def get_by_id(self, pk: Any) -> Optional["Address"]: ...

    def get_with_user(self, pk: Any) -> Optional["Address"]: ...

    def update_by_id(
        self, pk: Any, fields: Dict[str, Any], *, validate: bool = True
    ) -> Optional["Address"]: ...

    def delete_by_id(self, pk: Any) -> bool: ...
