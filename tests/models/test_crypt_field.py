"""
Tests for CryptField declarations.
"""

from dataclasses import dataclass
from typing import Annotated, List, Optional

from pydantic import BaseModel

from indaleko_cryptfield.models import CryptField, CryptMetadata, NO_CRYPT, crypt_field, declared_fields
from indaleko_cryptfield.models.crypt_field import CRYPT_FIELD_ATTR, find_crypt_field, strip_type


class Person(BaseModel):
    name: str
    ssn: Annotated[str, CryptField("ssn")]
    nickname: Annotated[Optional[str], CryptField(decrypt=False)] = None
    aliases: Annotated[List[str], CryptField()] = []
    age: Annotated[int, CryptField()] = 0


class Employee(Person):
    badge: Annotated[str, CryptField()] = ""


@dataclass
class Account:
    owner: str
    iban: Annotated[str, CryptField()]
    notes: Annotated[str | None, CryptField(encrypt=False)] = None


class Contact(BaseModel):
    email: Optional[Annotated[str, CryptField("email")]] = None
    phone: Annotated[str, CryptField()] | None = None


@dataclass
class Address:
    street: Optional[Annotated[str, CryptField()]] = None


class PlainRecord:
    def __init__(self, value: str) -> None:
        self.value = value


class TestCryptField:
    """Tests for the declaration helpers."""

    def test_defaults(self) -> None:
        declaration = CryptField()
        assert declaration.name == ""
        assert declaration.encrypt is True
        assert declaration.decrypt is True

    def test_find_crypt_field(self) -> None:
        assert find_crypt_field(Annotated[str, "other", CryptField("x")]) == CryptField("x")
        assert find_crypt_field(Annotated[str, "other"]) is None
        assert find_crypt_field(str) is None
        assert find_crypt_field(None) is None

    def test_find_crypt_field_inside_optional(self) -> None:
        assert find_crypt_field(Optional[Annotated[str, CryptField("x")]]) == CryptField("x")
        assert find_crypt_field(Annotated[str, CryptField("x")] | None) == CryptField("x")
        assert find_crypt_field(Optional[str]) is None
        assert find_crypt_field(Annotated[str, CryptField()] | int) is None

    def test_strip_type(self) -> None:
        assert strip_type(Annotated[str, CryptField()]) is str
        assert strip_type(Optional[str]) is str
        assert strip_type(str | None) is str
        assert strip_type(Annotated[Optional[str], CryptField()]) is str
        assert strip_type(List[str]) == List[str]

    def test_crypt_field_decorator(self) -> None:
        @crypt_field(decrypt=False)
        def method() -> str:
            return ""

        assert getattr(method, CRYPT_FIELD_ATTR) == CryptField(decrypt=False)


class TestDeclaredFields:
    """Tests for collecting field declarations."""

    def test_pydantic_model(self) -> None:
        fields = {field.attr: field for field in declared_fields(Person)}

        assert set(fields) == {"ssn", "nickname", "aliases", "age"}
        assert fields["ssn"].crypt_field.name == "ssn"
        assert fields["ssn"].is_string
        assert fields["nickname"].is_string
        assert fields["nickname"].crypt_field.decrypt is False
        assert fields["aliases"].is_list
        assert not fields["age"].is_string
        assert not fields["age"].is_list

    def test_inherited_fields(self) -> None:
        attrs = {field.attr for field in declared_fields(Employee)}
        assert attrs == {"ssn", "nickname", "aliases", "age", "badge"}

    def test_dataclass(self) -> None:
        fields = {field.attr: field for field in declared_fields(Account)}

        assert set(fields) == {"iban", "notes"}
        assert fields["iban"].is_string
        assert fields["notes"].is_string
        assert fields["notes"].crypt_field.encrypt is False

    def test_declarations_inside_optional(self) -> None:
        fields = {field.attr: field for field in declared_fields(Contact)}

        assert set(fields) == {"email", "phone"}
        assert fields["email"].crypt_field.name == "email"
        assert fields["email"].is_string
        assert fields["phone"].is_string

        (street,) = declared_fields(Address)
        assert street.attr == "street"
        assert street.is_string

    def test_undeclared_classes(self) -> None:
        assert declared_fields(PlainRecord) == ()
        assert declared_fields(object) == ()

    def test_cached(self) -> None:
        assert declared_fields(Person) is declared_fields(Person)


class TestCryptMetadata:
    """Tests for the CryptMetadata value type."""

    def test_no_crypt(self) -> None:
        assert NO_CRYPT.encryptable_params == frozenset()
        assert NO_CRYPT.decryptable is False
        assert not NO_CRYPT.has_encryptable_params

    def test_is_encryptable(self) -> None:
        metadata = CryptMetadata(frozenset({"email"}), True)

        assert metadata.is_encryptable("email")
        assert not metadata.is_encryptable("id")
        assert metadata.to_dict() == {"encryptable_params": ["email"], "decryptable": True}
