from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Request key -> model field. Only these keys can ever reach the database.
ADDRESS_FIELD_MAP: Dict[str, str] = {
    "countryCode": "country_code",
    "firstName": "first_name",
    "lastName": "last_name",
    "phone": "phone",
    "address1": "address1",
    "address2": "address2",
    "city": "city",
    "zone": "zone",
    "pinCode": "pin_code",
}

REQUIRED_ADDRESS_KEYS: List[str] = [
    key for key in ADDRESS_FIELD_MAP if key != "address2"
]


@dataclass
class AddressPatchCommand:
    """
    Sparse update for a single address.

    A whitelisted key is applied only when its value is truthy; empty strings
    and nulls count as "not supplied" and leave the stored value untouched.
    """

    address_id: Any
    owner_id: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @staticmethod
    def from_raw(address_id: Any, payload: Dict[str, Any]):
        if not isinstance(payload, dict):
            raise ValueError("Payload must be a dict")
        owner_id = payload.get("userId")
        if owner_id is not None and not isinstance(owner_id, str):
            owner_id = str(owner_id)
        fields: Dict[str, Any] = {}
        skipped: List[str] = []
        for key, model_field in ADDRESS_FIELD_MAP.items():
            if key not in payload:
                continue
            value = payload[key]
            if value:
                fields[model_field] = value
            else:
                skipped.append(key)
        return AddressPatchCommand(
            address_id=address_id,
            owner_id=owner_id,
            fields=fields,
            skipped=skipped,
        )

    @property
    def is_empty(self) -> bool:
        return not self.fields
