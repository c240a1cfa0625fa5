from django.urls import path
from .views import (
    AddressDetailView,
    MyAddressesView,
    UserAddressListView,
)

urlpatterns = [
    # Identifiers are matched as plain strings and validated by the service
    path("users/<str:user_id>/", UserAddressListView.as_view(), name="api-user-addresses"),
    path("me/", MyAddressesView.as_view(), name="api-my-addresses"),
    path("<str:address_id>/", AddressDetailView.as_view(), name="api-address-detail"),
]
