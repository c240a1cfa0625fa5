from dataclasses import dataclass
from typing import Optional, Union

from apps.users.dtos import UserSummaryDTO, user_to_summary_dto
from .models import Address


@dataclass
class AddressDTO:
    id: str
    user: Union[str, UserSummaryDTO]
    country_code: str
    first_name: str
    last_name: str
    phone: str
    address1: str
    address2: str
    city: str
    zone: str
    pin_code: str
    created_at: Optional[str]
    updated_at: Optional[str]


def _isoformat(value) -> Optional[str]:
    if value is None:
        return None
    try:
        return value.isoformat()
    except AttributeError:
        return str(value)


def address_to_dto(a: Address, *, with_user: bool = False) -> AddressDTO:
    """Map an address row; ``with_user`` embeds the owner instead of its id."""
    owner: Union[str, UserSummaryDTO] = (
        user_to_summary_dto(a.user) if with_user else str(a.user_id)
    )
    return AddressDTO(
        id=str(a.id),
        user=owner,
        country_code=a.country_code,
        first_name=a.first_name,
        last_name=a.last_name,
        phone=a.phone,
        address1=a.address1,
        address2=a.address2,
        city=a.city,
        zone=a.zone,
        pin_code=a.pin_code,
        created_at=_isoformat(a.created_at),
        updated_at=_isoformat(a.updated_at),
    )
