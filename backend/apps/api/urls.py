from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("addresses/", include("apps.addresses.urls")),
    # Identity provider for authenticated address operations
    path("auth/token/", TokenObtainPairView.as_view(), name="api-auth-token"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="api-auth-token-refresh",
    ),
]
