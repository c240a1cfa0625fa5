from __future__ import annotations

from apps.users.repositories import UserRepository
from .repositories import AddressRepository
from .services import AddressService


def build_address_service() -> AddressService:
    return AddressService(
        users=UserRepository(),
        addresses=AddressRepository(),
    )
