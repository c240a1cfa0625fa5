from rest_framework import serializers


class StrictCharField(serializers.CharField):
    """CharField that refuses numbers and other non-string JSON values."""

    default_error_messages = {"invalid": "Not a valid string."}

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class AddressCreateSerializer(serializers.Serializer):
    # CharField trims surrounding whitespace and rejects blank values by default
    countryCode = StrictCharField(source="country_code", max_length=10)
    firstName = StrictCharField(source="first_name", max_length=100)
    lastName = StrictCharField(source="last_name", max_length=100)
    phone = StrictCharField(max_length=50)
    address1 = StrictCharField(max_length=255)
    address2 = StrictCharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    city = StrictCharField(max_length=100)
    zone = StrictCharField(max_length=100)
    pinCode = StrictCharField(source="pin_code", max_length=20)


class AddressPatchSerializer(serializers.Serializer):
    """Request shape for partial updates; used for API documentation."""

    userId = serializers.UUIDField(
        help_text="Owner of the address; must match the stored owner."
    )
    countryCode = serializers.CharField(required=False)
    firstName = serializers.CharField(required=False)
    lastName = serializers.CharField(required=False)
    phone = serializers.CharField(required=False)
    address1 = serializers.CharField(required=False)
    address2 = serializers.CharField(required=False)
    city = serializers.CharField(required=False)
    zone = serializers.CharField(required=False)
    pinCode = serializers.CharField(required=False)


class UserSummarySerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    phone = serializers.CharField(read_only=True, allow_null=True)


class AddressSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    user = serializers.CharField(read_only=True)
    countryCode = serializers.CharField(source="country_code", read_only=True)
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    phone = serializers.CharField(read_only=True)
    address1 = serializers.CharField(read_only=True)
    address2 = serializers.CharField(read_only=True)
    city = serializers.CharField(read_only=True)
    zone = serializers.CharField(read_only=True)
    pinCode = serializers.CharField(source="pin_code", read_only=True)
    createdAt = serializers.CharField(source="created_at", read_only=True, allow_null=True)
    updatedAt = serializers.CharField(source="updated_at", read_only=True, allow_null=True)


class AddressDetailSerializer(AddressSerializer):
    user = UserSummarySerializer(read_only=True)
