import unittest
import uuid

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.addresses.services import AddressService
from apps.users.dtos import UserSummaryDTO


class FakeUser:
    def __init__(self, username="asha", **attrs):
        self.id = attrs.pop("id", None) or uuid.uuid4()
        self.username = username
        self.email = attrs.get("email", f"{username}@example.com")
        self.first_name = attrs.get("first_name", "")
        self.last_name = attrs.get("last_name", "")
        self.phone = attrs.get("phone")


class FakeAddress:
    def __init__(self, user, **data):
        self.id = uuid.uuid4()
        self.user = user
        self.user_id = user.id
        self.country_code = data.get("country_code", "")
        self.first_name = data.get("first_name", "")
        self.last_name = data.get("last_name", "")
        self.phone = data.get("phone", "")
        self.address1 = data.get("address1", "")
        self.address2 = data.get("address2", "")
        self.city = data.get("city", "")
        self.zone = data.get("zone", "")
        self.pin_code = data.get("pin_code", "")
        self.created_at = None
        self.updated_at = None


class FakeUserRepository:
    def __init__(self):
        self.storage = {}
        self.calls = []

    def add(self, user):
        self.storage[user.id] = user
        return user

    def get(self, **filters):
        self.calls.append(("get", filters))
        for user in self.storage.values():
            if all(getattr(user, k) == v for k, v in filters.items()):
                return user
        return None

    def get_by_id(self, pk):
        self.calls.append(("get_by_id", pk))
        return self.storage.get(pk)


class FakeAddressRepository:
    def __init__(self):
        self.storage = {}
        self.calls = []
        self.create_returns_none = False
        self.update_returns_none = False
        self.update_error = None
        self.delete_result = None

    def create(self, **data):
        self.calls.append(("create", data))
        if self.create_returns_none:
            return None
        user = data.pop("user")
        addr = FakeAddress(user, **data)
        self.storage[addr.id] = addr
        return addr

    def list_for_user(self, user_id):
        self.calls.append(("list_for_user", user_id))
        return [a for a in self.storage.values() if a.user_id == user_id]

    def get_by_id(self, pk):
        self.calls.append(("get_by_id", pk))
        return self.storage.get(pk)

    def get_with_user(self, pk):
        self.calls.append(("get_with_user", pk))
        return self.storage.get(pk)

    def update_by_id(self, pk, fields, *, validate=True):
        self.calls.append(("update_by_id", pk, dict(fields), validate))
        if self.update_error is not None:
            raise self.update_error
        if self.update_returns_none:
            return None
        addr = self.storage.get(pk)
        if addr is None:
            return None
        for key, value in fields.items():
            setattr(addr, key, value)
        return addr

    def delete_by_id(self, pk):
        self.calls.append(("delete_by_id", pk))
        if self.delete_result is not None:
            return self.delete_result
        return self.storage.pop(pk, None) is not None


def _payload(**overrides):
    data = {
        "countryCode": "IN",
        "firstName": "Asha",
        "lastName": "Rao",
        "phone": "9876543210",
        "address1": "12 MG Road",
        "address2": "Near Metro",
        "city": "Bengaluru",
        "zone": "Karnataka",
        "pinCode": "560001",
    }
    data.update(overrides)
    return data


class AddressServiceTestBase(unittest.TestCase):
    def setUp(self):
        self.user_repo = FakeUserRepository()
        self.address_repo = FakeAddressRepository()
        self.service = AddressService(users=self.user_repo, addresses=self.address_repo)
        self.owner = self.user_repo.add(
            FakeUser("asha", first_name="Asha", last_name="Rao", phone="111")
        )
        self.other = self.user_repo.add(FakeUser("ravi"))

    def _seed_address(self, user=None, **overrides):
        fields = {
            "country_code": "IN",
            "first_name": "Asha",
            "last_name": "Rao",
            "phone": "9876543210",
            "address1": "12 MG Road",
            "address2": "",
            "city": "Bengaluru",
            "zone": "Karnataka",
            "pin_code": "560001",
        }
        fields.update(overrides)
        return self.address_repo.create(user=user or self.owner, **fields)

    def _reset_calls(self):
        self.user_repo.calls.clear()
        self.address_repo.calls.clear()


class AddAddressTests(AddressServiceTestBase):
    def test_creates_address_linked_to_user(self):
        dto, error = self.service.add_address(str(self.owner.id), _payload())
        self.assertIsNone(error)
        self.assertEqual(dto.user, str(self.owner.id))
        self.assertEqual(dto.city, "Bengaluru")
        self.assertEqual(dto.pin_code, "560001")
        self.assertEqual(len(self.address_repo.storage), 1)

    def test_address2_is_persisted_trimmed(self):
        dto, error = self.service.add_address(
            str(self.owner.id), _payload(address2="   Flat 9   ")
        )
        self.assertIsNone(error)
        self.assertEqual(dto.address2, "Flat 9")
        stored = self.address_repo.storage[uuid.UUID(dto.id)]
        self.assertEqual(stored.address2, "Flat 9")

    def test_invalid_user_id_fails_without_lookup(self):
        dto, error = self.service.add_address("not-an-id", _payload())
        self.assertIsNone(dto)
        self.assertEqual(error[:2], ("NOT_FOUND", "User id is not valid"))
        self.assertEqual(self.user_repo.calls, [])
        self.assertEqual(self.address_repo.calls, [])

    def test_unknown_user_is_not_found(self):
        dto, error = self.service.add_address(str(uuid.uuid4()), _payload())
        self.assertIsNone(dto)
        self.assertEqual(error[:2], ("NOT_FOUND", "User not found"))
        self.assertEqual(self.address_repo.calls, [])

    def test_blank_required_field_aborts_creation(self):
        dto, error = self.service.add_address(str(self.owner.id), _payload(city="   "))
        self.assertIsNone(dto)
        code, message, details = error
        self.assertEqual(code, "VALIDATION_ERROR")
        self.assertEqual(message, "All fields are required")
        self.assertIn("city", details)
        self.assertEqual(self.address_repo.storage, {})

    def test_missing_required_field_aborts_creation(self):
        payload = _payload()
        payload.pop("zone")
        dto, error = self.service.add_address(str(self.owner.id), payload)
        self.assertIsNone(dto)
        self.assertEqual(error[0], "VALIDATION_ERROR")
        self.assertEqual(self.address_repo.storage, {})

    def test_falsy_create_result_is_server_error(self):
        self.address_repo.create_returns_none = True
        dto, error = self.service.add_address(str(self.owner.id), _payload())
        self.assertIsNone(dto)
        self.assertEqual(error, ("SERVER_ERROR", "Error while saving the address", None))


class ListAddressesTests(AddressServiceTestBase):
    def test_user_without_addresses_is_an_error(self):
        addresses, error = self.service.list_addresses(str(self.owner.id))
        self.assertIsNone(addresses)
        self.assertEqual(error[:2], ("NOT_FOUND", "No addresses found for this user"))

    def test_returns_exactly_the_users_addresses(self):
        first = self._seed_address(city="Pune")
        second = self._seed_address(city="Delhi")
        self._seed_address(user=self.other, city="Goa")
        addresses, error = self.service.list_addresses(str(self.owner.id))
        self.assertIsNone(error)
        self.assertEqual({a.id for a in addresses}, {str(first.id), str(second.id)})

    def test_invalid_user_id_fails_without_lookup(self):
        addresses, error = self.service.list_addresses("1234")
        self.assertIsNone(addresses)
        self.assertEqual(error[:2], ("NOT_FOUND", "Invalid User ID"))
        self.assertEqual(self.user_repo.calls, [])
        self.assertEqual(self.address_repo.calls, [])

    def test_unknown_user_is_not_found(self):
        addresses, error = self.service.list_addresses(str(uuid.uuid4()))
        self.assertEqual(error[:2], ("NOT_FOUND", "User not found"))
        self.assertEqual(self.address_repo.calls, [])


class GetAddressTests(AddressServiceTestBase):
    def test_embeds_owner(self):
        addr = self._seed_address()
        dto, error = self.service.get_address(str(addr.id))
        self.assertIsNone(error)
        self.assertIsInstance(dto.user, UserSummaryDTO)
        self.assertEqual(dto.user.id, str(self.owner.id))
        self.assertEqual(dto.user.username, "asha")
        self.assertEqual(self.address_repo.calls[-1], ("get_with_user", addr.id))

    def test_missing_address_is_not_found(self):
        dto, error = self.service.get_address(str(uuid.uuid4()))
        self.assertIsNone(dto)
        self.assertEqual(error[:2], ("NOT_FOUND", "Address not found"))

    def test_invalid_address_id_fails_without_lookup(self):
        self._reset_calls()
        dto, error = self.service.get_address("bogus")
        self.assertEqual(error[:2], ("NOT_FOUND", "Invalid Address ID"))
        self.assertEqual(self.address_repo.calls, [])


class EditAddressTests(AddressServiceTestBase):
    def test_updates_only_supplied_fields(self):
        addr = self._seed_address()
        dto, error = self.service.edit_address(
            str(addr.id),
            {"userId": str(self.owner.id), "city": "Mysuru", "pinCode": "570001"},
        )
        self.assertIsNone(error)
        self.assertEqual(dto.city, "Mysuru")
        self.assertEqual(dto.pin_code, "570001")
        self.assertEqual(dto.address1, "12 MG Road")
        self.assertEqual(dto.first_name, "Asha")

    def test_empty_strings_do_not_clear_fields(self):
        addr = self._seed_address()
        dto, error = self.service.edit_address(
            str(addr.id), {"userId": str(self.owner.id), "city": "", "phone": "222"}
        )
        self.assertIsNone(error)
        self.assertEqual(dto.city, "Bengaluru")
        self.assertEqual(dto.phone, "222")
        _, _, fields, validate = self.address_repo.calls[-1]
        self.assertEqual(fields, {"phone": "222"})
        self.assertTrue(validate)

    def test_no_recognised_fields_still_calls_update(self):
        addr = self._seed_address()
        dto, error = self.service.edit_address(
            str(addr.id), {"userId": str(self.owner.id), "nickname": "home"}
        )
        self.assertIsNone(error)
        self.assertEqual(self.address_repo.calls[-1][0], "update_by_id")
        self.assertEqual(self.address_repo.calls[-1][2], {})
        self.assertEqual(dto.id, str(addr.id))

    def test_owner_mismatch_is_forbidden_and_leaves_address_untouched(self):
        addr = self._seed_address()
        dto, error = self.service.edit_address(
            str(addr.id), {"userId": str(self.other.id), "city": "Hacked"}
        )
        self.assertIsNone(dto)
        self.assertEqual(error[0], "FORBIDDEN")
        self.assertEqual(addr.city, "Bengaluru")
        self.assertNotIn("update_by_id", [c[0] for c in self.address_repo.calls])

    def test_missing_owner_id_is_forbidden(self):
        addr = self._seed_address()
        _, error = self.service.edit_address(str(addr.id), {"city": "Mysuru"})
        self.assertEqual(error[0], "FORBIDDEN")

    def test_missing_address_is_not_found(self):
        _, error = self.service.edit_address(
            str(uuid.uuid4()), {"userId": str(self.owner.id), "city": "Mysuru"}
        )
        self.assertEqual(error[:2], ("NOT_FOUND", "Address not found"))

    def test_invalid_address_id_fails_without_lookup(self):
        self._reset_calls()
        _, error = self.service.edit_address("zzz", {"userId": str(self.owner.id)})
        self.assertEqual(error[:2], ("NOT_FOUND", "Invalid Address ID"))
        self.assertEqual(self.address_repo.calls, [])

    def test_non_dict_payload_is_rejected(self):
        addr = self._seed_address()
        _, error = self.service.edit_address(str(addr.id), ["city"])
        self.assertEqual(error[0], "VALIDATION_ERROR")

    def test_falsy_update_result_is_server_error(self):
        addr = self._seed_address()
        self.address_repo.update_returns_none = True
        dto, error = self.service.edit_address(
            str(addr.id), {"userId": str(self.owner.id), "city": "Mysuru"}
        )
        self.assertIsNone(dto)
        self.assertEqual(error, ("SERVER_ERROR", "Error while updating the address", None))

    def test_schema_violation_reports_request_keys(self):
        addr = self._seed_address()
        self.address_repo.update_error = DjangoValidationError(
            {"pin_code": ["Ensure this value has at most 20 characters (it has 30)."]}
        )
        _, error = self.service.edit_address(
            str(addr.id), {"userId": str(self.owner.id), "pinCode": "9" * 30}
        )
        code, message, details = error
        self.assertEqual(code, "VALIDATION_ERROR")
        self.assertIn("pinCode", details)


class DeleteAddressTests(AddressServiceTestBase):
    def test_owner_can_delete(self):
        addr = self._seed_address()
        deleted, error = self.service.delete_address(
            str(addr.id), actor_id=self.owner.id, is_superuser=False
        )
        self.assertTrue(deleted)
        self.assertIsNone(error)
        self.assertNotIn(addr.id, self.address_repo.storage)

    def test_superuser_can_delete_any_address(self):
        addr = self._seed_address()
        deleted, error = self.service.delete_address(
            str(addr.id), actor_id=self.other.id, is_superuser=True
        )
        self.assertTrue(deleted)
        self.assertIsNone(error)

    def test_other_user_is_forbidden(self):
        addr = self._seed_address()
        deleted, error = self.service.delete_address(
            str(addr.id), actor_id=self.other.id, is_superuser=False
        )
        self.assertFalse(deleted)
        self.assertEqual(error[0], "FORBIDDEN")
        self.assertIn(addr.id, self.address_repo.storage)

    def test_missing_address_is_not_found_without_side_effects(self):
        self._seed_address()
        deleted, error = self.service.delete_address(
            str(uuid.uuid4()), actor_id=self.owner.id, is_superuser=False
        )
        self.assertFalse(deleted)
        self.assertEqual(error[:2], ("NOT_FOUND", "Address not found"))
        self.assertEqual(len(self.address_repo.storage), 1)
        self.assertNotIn("delete_by_id", [c[0] for c in self.address_repo.calls])

    def test_anonymous_caller_is_unauthorized(self):
        addr = self._seed_address()
        deleted, error = self.service.delete_address(
            str(addr.id), actor_id=None, is_superuser=False
        )
        self.assertFalse(deleted)
        self.assertEqual(error[0], "UNAUTHORIZED")

    def test_invalid_address_id_fails_without_lookup(self):
        self._reset_calls()
        deleted, error = self.service.delete_address(
            "nope", actor_id=self.owner.id, is_superuser=False
        )
        self.assertFalse(deleted)
        self.assertEqual(error[:2], ("NOT_FOUND", "Invalid Address ID"))
        self.assertEqual(self.address_repo.calls, [])

    def test_concurrent_removal_reports_not_found(self):
        addr = self._seed_address()
        self.address_repo.delete_result = False
        deleted, error = self.service.delete_address(
            str(addr.id), actor_id=self.owner.id, is_superuser=False
        )
        self.assertFalse(deleted)
        self.assertEqual(error[0], "NOT_FOUND")


class CheckUserHasAddressTests(AddressServiceTestBase):
    def test_missing_identity_is_not_found(self):
        addresses, error = self.service.check_user_has_address(None)
        self.assertIsNone(addresses)
        self.assertEqual(error[:2], ("NOT_FOUND", "User id not found"))
        self.assertEqual(self.user_repo.calls, [])

    def test_unknown_user_is_not_found(self):
        _, error = self.service.check_user_has_address(uuid.uuid4())
        self.assertEqual(error[:2], ("NOT_FOUND", "User not found"))

    def test_no_addresses_is_an_error(self):
        addresses, error = self.service.check_user_has_address(self.owner.id)
        self.assertIsNone(addresses)
        self.assertEqual(error[:2], ("NOT_FOUND", "No address found for this user"))

    def test_returns_callers_addresses(self):
        addr = self._seed_address()
        self._seed_address(user=self.other)
        addresses, error = self.service.check_user_has_address(self.owner.id)
        self.assertIsNone(error)
        self.assertEqual([a.id for a in addresses], [str(addr.id)])
