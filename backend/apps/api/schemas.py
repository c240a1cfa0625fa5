from typing import Optional

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField()
    details = serializers.JSONField(required=False)
    hint = serializers.CharField(required=False, allow_blank=True)
    extra = serializers.JSONField(required=False)


class ErrorResponseSerializer(serializers.Serializer):
    statusCode = serializers.IntegerField()
    data = serializers.JSONField(allow_null=True)
    message = serializers.CharField()
    success = serializers.BooleanField()
    error = ErrorDetailSerializer()


def envelope_response(
    item_serializer_class: Optional[type[serializers.Serializer]] = None,
    *,
    many: bool = False,
) -> type[serializers.Serializer]:
    """Create an inline serializer describing the success envelope.

    Returns a serializer with fields: statusCode, data[item_serializer], message, success.
    Passing no item serializer documents a ``null`` payload.
    """
    name = getattr(item_serializer_class, "__name__", "Empty")
    if item_serializer_class is None:
        data_field = serializers.JSONField(allow_null=True)
    else:
        data_field = item_serializer_class(many=many)
    return inline_serializer(
        name=f"{name}{'List' if many else ''}Envelope",
        fields={
            "statusCode": serializers.IntegerField(),
            "data": data_field,
            "message": serializers.CharField(),
            "success": serializers.BooleanField(),
        },
    )
