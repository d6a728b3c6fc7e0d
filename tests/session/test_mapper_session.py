"""
Tests for the MapperSession class.
"""

from typing import Annotated, Any

import pytest
from pydantic import BaseModel

from conftest import ReversingCipher, enc
from indaleko_cryptfield.binding import ParamMap, StrictMap
from indaleko_cryptfield.models import CryptField, crypt_field
from indaleko_cryptfield.plugin import CryptInterceptor, MappedStatement, RowBounds, StatementKind
from indaleko_cryptfield.registry import MetadataStore, mapper, statement_id
from indaleko_cryptfield.session import MapperSession, TooManyResultsError, delete, insert, select, update


class Member(BaseModel):
    name: str
    email: Annotated[str, CryptField()]


@mapper
class MemberMapper:
    @insert("INSERT {name: @name, email: @email} INTO members")
    def add(self, member: Member) -> int:
        ...

    @update("FOR m IN members FILTER m.name == @name UPDATE m WITH {email: @email} IN members")
    def change_email(self, name: str, email: Annotated[str, CryptField()]) -> int:
        ...

    @delete("FOR m IN members FILTER m.email IN @list REMOVE m IN members")
    def remove_by_emails(self, emails: Annotated[list, CryptField()]) -> int:
        ...

    @crypt_field(decrypt=True)
    @select("FOR m IN members FILTER m.name == @name RETURN m.email", one=True)
    def find_email(self, name: str) -> str:
        ...

    @select("FOR m IN members RETURN m", result_type=Member)
    def all(self) -> list[Member]:
        ...

    def not_a_statement(self) -> None:
        ...


class FakeExecutor:
    """In-memory executor recording statements and returning canned rows."""

    def __init__(self, rows: list | None = None, count: int = 1) -> None:
        self.rows = rows if rows is not None else []
        self.count = count
        self.seen: list[tuple[MappedStatement, Any]] = []

    def update(self, statement: MappedStatement, parameter: Any) -> int:
        self.seen.append((statement, parameter))
        return self.count

    def query(self, statement, parameter, row_bounds=RowBounds(), result_handler=None) -> list:
        self.seen.append((statement, parameter))
        return row_bounds.apply(list(self.rows))


class TestMapperSession:
    """Tests for the MapperSession class."""

    def setup_method(self) -> None:
        self.cipher = ReversingCipher()
        self.interceptor = CryptInterceptor(cipher=self.cipher, store=MetadataStore(), separator="|")

    def _session(self, executor: FakeExecutor) -> MapperSession:
        return MapperSession(self.interceptor.plugin(executor))

    def test_insert_encrypts_declared_fields(self) -> None:
        executor = FakeExecutor()
        members = self._session(executor).get_mapper(MemberMapper)

        assert members.add(Member(name="Ann", email="ann@example.com")) == 1

        statement, parameter = executor.seen[0]
        assert statement.id == statement_id(MemberMapper, "add")
        assert statement.kind == StatementKind.INSERT
        assert parameter.email == enc("ann@example.com")
        assert parameter.name == "Ann"

    def test_update_encrypts_declared_parameters(self) -> None:
        executor = FakeExecutor()
        members = self._session(executor).get_mapper(MemberMapper)

        members.change_email("Ann", email="new@example.com")

        _, parameter = executor.seen[0]
        assert isinstance(parameter, ParamMap)
        assert parameter["email"] == enc("new@example.com")
        assert parameter["name"] == "Ann"
        assert parameter["param2"] == "new@example.com"

    def test_list_parameter(self) -> None:
        executor = FakeExecutor()
        members = self._session(executor).get_mapper(MemberMapper)

        members.remove_by_emails(["a@x", "b@x"])

        _, parameter = executor.seen[0]
        assert isinstance(parameter, StrictMap)
        assert parameter["list"] == [enc("a@x"), enc("b@x")]

    def test_select_one_decrypts(self) -> None:
        executor = FakeExecutor(rows=[enc("ann@example.com")])
        members = self._session(executor).get_mapper(MemberMapper)

        assert members.find_email("Ann") == "ann@example.com"
        # The lookup parameter itself is not declared
        assert executor.seen[0][1] == "Ann"

    def test_select_one_empty(self) -> None:
        members = self._session(FakeExecutor(rows=[])).get_mapper(MemberMapper)
        assert members.find_email("nobody") is None

    def test_select_one_too_many(self) -> None:
        members = self._session(FakeExecutor(rows=[enc("a"), enc("b")])).get_mapper(MemberMapper)

        with pytest.raises(TooManyResultsError):
            members.find_email("Ann")

    def test_select_list_decrypts_objects(self) -> None:
        rows = [Member(name="Ann", email=enc("ann@example.com")), Member(name="Bob", email="legacy@example.com")]
        members = self._session(FakeExecutor(rows=rows)).get_mapper(MemberMapper)

        result = members.all()

        assert [m.email for m in result] == ["ann@example.com", "legacy@example.com"]
        assert [m.name for m in result] == ["Ann", "Bob"]

    def test_not_a_statement(self) -> None:
        members = self._session(FakeExecutor()).get_mapper(MemberMapper)

        with pytest.raises(AttributeError):
            members.not_a_statement()

    def test_statements_are_cached(self) -> None:
        executor = FakeExecutor()
        members = self._session(executor).get_mapper(MemberMapper)

        members.find_email("a")
        members.find_email("b")

        assert executor.seen[0][0] is executor.seen[1][0]

    def test_select_list_row_bounds(self) -> None:
        session = self._session(FakeExecutor(rows=[1, 2, 3, 4]))
        statement = MappedStatement(id="nowhere.Mapper.rows")

        assert session.select_list(statement, None, RowBounds(offset=1, limit=2)) == [2, 3]
