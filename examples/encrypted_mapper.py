"""
Example of transparent field encryption through a mapper.

This example runs mapper statements against an in-memory executor so the
stored ciphertext can be inspected without an ArangoDB server.
"""

import json
import os
from typing import Annotated, Any, Optional

from pydantic import BaseModel

from indaleko_cryptfield import (
    CryptField,
    CryptFieldConfig,
    CryptInterceptor,
    MappedStatement,
    MapperSession,
    RowBounds,
    crypt_field,
    insert,
    mapper,
    select,
)


class Patient(BaseModel):
    """
    Patient record with sensitive fields.

    Only fields declared with CryptField are encrypted.
    """

    name: str
    ssn: Annotated[str, CryptField()]
    phone: Annotated[Optional[str], CryptField()] = None
    ward: int = 0


@mapper
class PatientMapper:
    """Statements on the patients table."""

    @insert("INSERT {name: @name, ssn: @ssn, phone: @phone, ward: @ward} INTO patients")
    def add(self, patient: Patient) -> int:
        ...

    @select("FOR p IN patients RETURN p", result_type=Patient)
    def all(self) -> list[Patient]:
        ...

    @crypt_field(decrypt=True)
    @select("FOR p IN patients FILTER p.name == @name RETURN p.ssn", one=True)
    def find_ssn(self, name: str) -> str:
        ...


class MemoryExecutor:
    """Executor keeping inserted models in a list."""

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []

    def update(self, statement: MappedStatement, parameter: Any) -> int:
        self.rows.append(parameter.model_dump())
        return 1

    def query(self, statement, parameter, row_bounds=RowBounds(), result_handler=None) -> list:
        if statement.result_type is not None:
            return [statement.result_type.model_validate(row) for row in self.rows]
        return [row["ssn"] for row in self.rows if row["name"] == parameter]


def main() -> None:
    """Example usage of encrypted fields through a mapper session."""
    os.environ["INDALEKO_MODE"] = "DEV"
    os.environ["INDALEKO_ENCRYPTION_KEY"] = "example-master-key-for-demonstration"
    CryptFieldConfig.initialize()

    storage = MemoryExecutor()
    session = MapperSession(CryptInterceptor().plugin(storage))
    patients = session.get_mapper(PatientMapper)

    patients.add(Patient(name="Jane Roe", ssn="123-45-6789", phone="555-0100", ward=4))

    print("Stored row (what the database sees):")
    print(json.dumps(storage.rows, indent=2))

    print("\nRead back through the mapper:")
    for patient in patients.all():
        print(f"  {patient.name}: ssn={patient.ssn} phone={patient.phone} ward={patient.ward}")

    print("\nSSN lookup:", patients.find_ssn("Jane Roe"))


if __name__ == "__main__":
    main()
