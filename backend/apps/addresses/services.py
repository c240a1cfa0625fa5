from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError as DRFValidationError

from apps.api.utils import ServiceError
from apps.common import get_logger
from apps.common.identifiers import parse_identifier, same_identifier
from apps.users.protocols import UserRepositoryProtocol
from .commands import ADDRESS_FIELD_MAP, AddressPatchCommand
from .dtos import AddressDTO, address_to_dto
from .protocols import AddressRepositoryProtocol
from .serializers import AddressCreateSerializer

logger = get_logger(__name__).bind(component="addresses", layer="service")

_MODEL_TO_REQUEST_KEY = {model: key for key, model in ADDRESS_FIELD_MAP.items()}


class AddressService:
    """
    Address book operations.

    Every public method returns ``(result, error)``; ``error`` is ``None`` on
    success or a ``(code, message, details)`` tuple that the view turns into the
    error envelope. Identifiers are checked for syntax before any repository
    call so malformed ids never reach the database.
    """

    def __init__(
        self, users: UserRepositoryProtocol, addresses: AddressRepositoryProtocol
    ):
        self.users = users
        self.addresses = addresses
        self.logger = logger.bind(service="AddressService")

    def _resolve_user(
        self, user_id: Any, invalid_message: str
    ) -> Tuple[Optional[Any], Optional[ServiceError]]:
        parsed = parse_identifier(user_id)
        if parsed is None:
            self.logger.info("Rejected malformed user id", user_id=user_id)
            return None, ("NOT_FOUND", invalid_message, {"userId": str(user_id)})
        user = self.users.get_by_id(parsed)
        if not user:
            self.logger.info("User not found", user_id=str(parsed))
            return None, ("NOT_FOUND", "User not found", {"userId": str(parsed)})
        return user, None

    def add_address(
        self, user_id: Any, data: Dict[str, Any]
    ) -> Tuple[Optional[AddressDTO], Optional[ServiceError]]:
        user, error = self._resolve_user(user_id, "User id is not valid")
        if error:
            return None, error
        serializer = AddressCreateSerializer(data=data)
        try:
            serializer.is_valid(raise_exception=True)
        except DRFValidationError as exc:
            self.logger.warning(
                "Address create validation failed",
                user_id=str(user.id),
                errors=exc.detail,
            )
            return None, ("VALIDATION_ERROR", "All fields are required", exc.detail)
        self.logger.info("Creating address", user_id=str(user.id))
        address = self.addresses.create(user=user, **serializer.validated_data)
        if not address:
            self.logger.error("Address create returned no record", user_id=str(user.id))
            return None, ("SERVER_ERROR", "Error while saving the address", None)
        self.logger.info("Address created", user_id=str(user.id), address_id=str(address.id))
        return address_to_dto(address), None

    def list_addresses(
        self, user_id: Any
    ) -> Tuple[Optional[List[AddressDTO]], Optional[ServiceError]]:
        user, error = self._resolve_user(user_id, "Invalid User ID")
        if error:
            return None, error
        self.logger.debug("Listing addresses", user_id=str(user.id))
        addresses = list(self.addresses.list_for_user(user.id))
        if not addresses:
            self.logger.info("No addresses for user", user_id=str(user.id))
            return None, (
                "NOT_FOUND",
                "No addresses found for this user",
                {"userId": str(user.id)},
            )
        return [address_to_dto(a) for a in addresses], None

    def get_address(
        self, address_id: Any
    ) -> Tuple[Optional[AddressDTO], Optional[ServiceError]]:
        parsed = parse_identifier(address_id)
        if parsed is None:
            self.logger.info("Rejected malformed address id", address_id=address_id)
            return None, ("NOT_FOUND", "Invalid Address ID", {"addressId": str(address_id)})
        self.logger.debug("Fetching address", address_id=str(parsed))
        address = self.addresses.get_with_user(parsed)
        if not address:
            self.logger.info("Address not found", address_id=str(parsed))
            return None, ("NOT_FOUND", "Address not found", {"addressId": str(parsed)})
        return address_to_dto(address, with_user=True), None

    def edit_address(
        self, address_id: Any, data: Dict[str, Any]
    ) -> Tuple[Optional[AddressDTO], Optional[ServiceError]]:
        parsed = parse_identifier(address_id)
        if parsed is None:
            self.logger.info("Rejected malformed address id", address_id=address_id)
            return None, ("NOT_FOUND", "Invalid Address ID", {"addressId": str(address_id)})
        try:
            command = AddressPatchCommand.from_raw(parsed, data)
        except ValueError as exc:
            self.logger.warning("Address update payload rejected", address_id=str(parsed))
            return None, ("VALIDATION_ERROR", "Invalid input", {"detail": str(exc)})

        address = self.addresses.get_by_id(parsed)
        if not address:
            self.logger.info("Address update failed: not found", address_id=str(parsed))
            return None, ("NOT_FOUND", "Address not found", {"addressId": str(parsed)})
        if not same_identifier(address.user_id, command.owner_id):
            self.logger.warning(
                "Address update forbidden",
                address_id=str(parsed),
                owner_id=str(address.user_id),
                claimed_owner_id=command.owner_id,
            )
            return None, (
                "FORBIDDEN",
                "You do not have permission to edit this address",
                None,
            )

        if command.skipped:
            self.logger.debug(
                "Ignoring empty address fields", address_id=str(parsed), fields=command.skipped
            )
        self.logger.info(
            "Updating address", address_id=str(parsed), fields=sorted(command.fields)
        )
        try:
            updated = self.addresses.update_by_id(parsed, command.fields, validate=True)
        except DjangoValidationError as exc:
            errors = _request_keyed_errors(exc)
            self.logger.warning(
                "Address update validation failed", address_id=str(parsed), errors=errors
            )
            return None, ("VALIDATION_ERROR", "Invalid input", errors)
        if not updated:
            self.logger.error("Address update returned no record", address_id=str(parsed))
            return None, ("SERVER_ERROR", "Error while updating the address", None)
        self.logger.info("Address updated", address_id=str(parsed))
        return address_to_dto(updated), None

    def delete_address(
        self,
        address_id: Any,
        *,
        actor_id: Optional[Any],
        is_superuser: bool,
    ) -> Tuple[bool, Optional[ServiceError]]:
        parsed = parse_identifier(address_id)
        if parsed is None:
            self.logger.info("Rejected malformed address id", address_id=address_id)
            return False, ("NOT_FOUND", "Invalid Address ID", {"addressId": str(address_id)})
        if actor_id is None:
            self.logger.warning("Address delete unauthorized", address_id=str(parsed))
            return False, ("UNAUTHORIZED", "Authentication required", None)
        address = self.addresses.get_by_id(parsed)
        if not address:
            self.logger.info("Address delete failed: not found", address_id=str(parsed))
            return False, ("NOT_FOUND", "Address not found", {"addressId": str(parsed)})
        if not is_superuser and not same_identifier(address.user_id, actor_id):
            self.logger.warning(
                "Address delete forbidden",
                address_id=str(parsed),
                actor_id=str(actor_id),
                owner_id=str(address.user_id),
            )
            return False, (
                "FORBIDDEN",
                "You do not have permission to delete this address",
                None,
            )
        self.logger.info("Deleting address", address_id=str(parsed), actor_id=str(actor_id))
        if not self.addresses.delete_by_id(parsed):
            # removed by a concurrent request after the lookup
            self.logger.warning("Address vanished before delete", address_id=str(parsed))
            return False, ("NOT_FOUND", "Address not found", {"addressId": str(parsed)})
        self.logger.info("Address deleted", address_id=str(parsed))
        return True, None

    def check_user_has_address(
        self, actor_id: Optional[Any]
    ) -> Tuple[Optional[List[AddressDTO]], Optional[ServiceError]]:
        if actor_id is None:
            self.logger.warning("Address check without caller identity")
            return None, ("NOT_FOUND", "User id not found", None)
        user, error = self._resolve_user(actor_id, "User id not found")
        if error:
            return None, error
        self.logger.debug("Checking caller addresses", user_id=str(user.id))
        addresses = list(self.addresses.list_for_user(user.id))
        if not addresses:
            self.logger.info("Caller has no addresses", user_id=str(user.id))
            return None, (
                "NOT_FOUND",
                "No address found for this user",
                {"userId": str(user.id)},
            )
        return [address_to_dto(a) for a in addresses], None


def _request_keyed_errors(exc: DjangoValidationError) -> Any:
    if not hasattr(exc, "message_dict"):
        return {"detail": list(exc.messages)}
    return {
        _MODEL_TO_REQUEST_KEY.get(name, name): messages
        for name, messages in exc.message_dict.items()
    }
