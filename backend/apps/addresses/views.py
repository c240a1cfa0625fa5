from typing import Any, Optional, Tuple

from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer, envelope_response
from apps.api.utils import api_response, service_error_response
from apps.common import get_logger
from .container import build_address_service
from .serializers import (
    AddressCreateSerializer,
    AddressDetailSerializer,
    AddressPatchSerializer,
    AddressSerializer,
)

logger = get_logger(__name__).bind(component="addresses", layer="view")

_ERROR = OpenApiResponse(response=ErrorResponseSerializer)
_ADDRESS_ENVELOPE = envelope_response(AddressSerializer)
_ADDRESS_LIST_ENVELOPE = envelope_response(AddressSerializer, many=True)
_ADDRESS_DETAIL_ENVELOPE = envelope_response(AddressDetailSerializer)
_EMPTY_ENVELOPE = envelope_response()


def _caller(request) -> Tuple[Optional[Any], bool]:
    """Identity of the authenticated caller, handed explicitly to the service."""
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return None, False
    return getattr(user, "id", None), bool(getattr(user, "is_superuser", False))


@extend_schema(tags=["Addresses"])
class UserAddressListView(APIView):
    permission_classes = [AllowAny]
    service = build_address_service()
    log = logger.bind(view="UserAddressListView")

    @extend_schema(
        summary="Create address for a user",
        parameters=[OpenApiParameter("user_id", str, OpenApiParameter.PATH)],
        request=AddressCreateSerializer,
        responses={
            200: _ADDRESS_ENVELOPE,
            400: _ERROR,
            404: _ERROR,
            500: _ERROR,
        },
    )
    def post(self, request, user_id: str):
        self.log.bind_request(request).info("Creating address via API", user_id=user_id)
        dto, error = self.service.add_address(user_id, request.data)
        if error:
            return service_error_response(error)
        return api_response(AddressSerializer(dto).data, "Address saved successfully")

    @extend_schema(
        summary="List addresses for a user",
        description="Fails with 404 when the user has no addresses.",
        parameters=[OpenApiParameter("user_id", str, OpenApiParameter.PATH)],
        responses={200: _ADDRESS_LIST_ENVELOPE, 404: _ERROR},
    )
    def get(self, request, user_id: str):
        self.log.bind_request(request).debug("Listing addresses via API", user_id=user_id)
        addresses, error = self.service.list_addresses(user_id)
        if error:
            return service_error_response(error)
        return api_response(
            AddressSerializer(addresses, many=True).data,
            "Addresses fetched successfully",
        )


@extend_schema(tags=["Addresses"])
class AddressDetailView(APIView):
    service = build_address_service()
    log = logger.bind(view="AddressDetailView")

    def get_permissions(self):
        """Deleting requires an authenticated owner; reads and edits are open."""
        request = getattr(self, "request", None)
        if request is not None and request.method == "DELETE":
            return [IsAuthenticated()]
        return [AllowAny()]

    @extend_schema(
        summary="Get address by ID",
        description="The owning user is embedded in the response.",
        parameters=[OpenApiParameter("address_id", str, OpenApiParameter.PATH)],
        responses={200: _ADDRESS_DETAIL_ENVELOPE, 404: _ERROR},
    )
    def get(self, request, address_id: str):
        self.log.bind_request(request).debug("Fetching address", address_id=address_id)
        dto, error = self.service.get_address(address_id)
        if error:
            return service_error_response(error)
        return api_response(
            AddressDetailSerializer(dto).data, "Address fetched successfully"
        )

    @extend_schema(
        summary="Update address by ID",
        description=(
            "Applies only the supplied, non-empty fields. The body must carry the "
            "owner's userId."
        ),
        parameters=[OpenApiParameter("address_id", str, OpenApiParameter.PATH)],
        request=AddressPatchSerializer,
        responses={
            200: _ADDRESS_ENVELOPE,
            400: _ERROR,
            403: _ERROR,
            404: _ERROR,
            500: _ERROR,
        },
    )
    def patch(self, request, address_id: str):
        self.log.bind_request(request).info("Updating address via API", address_id=address_id)
        dto, error = self.service.edit_address(address_id, request.data)
        if error:
            return service_error_response(error)
        return api_response(AddressSerializer(dto).data, "Address updated successfully")

    @extend_schema(
        summary="Update address by ID (PUT alias)",
        parameters=[OpenApiParameter("address_id", str, OpenApiParameter.PATH)],
        request=AddressPatchSerializer,
        responses={
            200: _ADDRESS_ENVELOPE,
            400: _ERROR,
            403: _ERROR,
            404: _ERROR,
            500: _ERROR,
        },
    )
    def put(self, request, address_id: str):
        return self.patch(request, address_id)

    @extend_schema(
        summary="Delete address by ID",
        description="Only the owner or a superuser may delete an address.",
        parameters=[OpenApiParameter("address_id", str, OpenApiParameter.PATH)],
        responses={
            200: _EMPTY_ENVELOPE,
            401: _ERROR,
            403: _ERROR,
            404: _ERROR,
        },
    )
    def delete(self, request, address_id: str):
        actor_id, is_superuser = _caller(request)
        self.log.bind_request(request).info(
            "Deleting address via API", address_id=address_id, superuser=is_superuser
        )
        _deleted, error = self.service.delete_address(
            address_id,
            actor_id=actor_id,
            is_superuser=is_superuser,
        )
        if error:
            return service_error_response(error)
        return api_response(None, "Address deleted successfully")


@extend_schema(tags=["Addresses"])
class MyAddressesView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_address_service()
    log = logger.bind(view="MyAddressesView")

    @extend_schema(
        summary="List the caller's addresses",
        description="Fails with 404 when the authenticated user has no addresses.",
        responses={
            200: _ADDRESS_LIST_ENVELOPE,
            401: _ERROR,
            404: _ERROR,
        },
    )
    def get(self, request):
        actor_id, _ = _caller(request)
        self.log.bind_request(request).debug("Checking caller addresses")
        addresses, error = self.service.check_user_has_address(actor_id)
        if error:
            return service_error_response(error)
        return api_response(
            AddressSerializer(addresses, many=True).data,
            "Addresses fetched successfully",
        )
