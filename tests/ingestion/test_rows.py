from __future__ import annotations

from typing import List, Optional

import pytest

from lead_importer.config import ImporterConfig
from lead_importer.ingestion import import_csv_content
from lead_importer.ingestion.rows import EMPTY_FILE_MESSAGE, process_table, split_city_state
from lead_importer.models import LeadRecord
from lead_importer.storage import InMemoryStorage

SAMPLE_CSV = (
    "nome;email;telefone;cidade\n"
    "João Silva;joao@x.com;(43) 99114-2751;São Paulo\n"
    ";;;\n"
    "Maria;maria@x.com;;Rio de Janeiro\n"
)


class FlakyStorage:
    """Storage that refuses to persist leads with a given name."""

    def __init__(self, failing_name: str) -> None:
        self.failing_name = failing_name
        self.saved: List[LeadRecord] = []

    def create_prospecting_result(self, lead: LeadRecord) -> LeadRecord:
        if lead.name == self.failing_name:
            raise RuntimeError("database unavailable")
        self.saved.append(lead)
        return lead

    def get_lead_by_search_and_phone(self, search_id: int, phone: str) -> Optional[LeadRecord]:
        return None


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


def test_end_to_end_semicolon_file(storage):
    result = import_csv_content(SAMPLE_CSV, 1, storage)

    assert result.imported_leads == 2
    assert result.error_leads == 0
    assert result.message == "Import complete: 2 leads added, 0 errors"

    joao, maria = storage.get_results_by_search(1)
    assert joao.name == "João Silva"
    assert joao.email == "joao@x.com"
    assert joao.phone == "5543991142751"
    assert joao.city == "São Paulo"
    assert joao.search_id == 1
    assert maria.name == "Maria"
    assert maria.email == "maria@x.com"
    assert maria.phone is None
    assert maria.city == "Rio de Janeiro"


def test_result_payload_uses_camel_case_keys(storage):
    content = "nome;telefone;cidade\nAna;43991142751;Londrina\n;;Maringá\nAna B;43991142751;Londrina\n"

    payload = import_csv_content(content, 1, storage).as_dict()

    assert payload == {
        "importedLeads": 1,
        "errorLeads": 1,
        "duplicateLeads": 1,
        "message": "Import complete: 1 leads added, 1 duplicates skipped, 1 errors",
    }


def test_rows_without_identifying_fields_are_errors(storage):
    content = "nome;email;telefone;endereco\n;;;Rua A, 10\nAna;;;Rua B\n"

    result = import_csv_content(content, 3, storage)

    assert result.imported_leads == 1
    assert result.error_leads == 1
    assert [lead.name for lead in storage.get_results_by_search(3)] == ["Ana"]


def test_combined_city_state_column_is_split(storage):
    content = "Nome,Telefone,Cidade/UF\nAna,43991142751,Londrina - PR\nBia,43991142752,Curitiba\n"

    import_csv_content(content, 5, storage)

    ana, bia = storage.get_results_by_search(5)
    assert (ana.city, ana.state) == ("Londrina", "PR")
    assert (bia.city, bia.state) == ("Curitiba", None)
    assert ana.phone == "5543991142751"


def test_storage_failures_are_counted_and_processing_continues():
    storage = FlakyStorage(failing_name="Boom")
    content = "nome,email\nAna,ana@x.com\nBoom,boom@x.com\nBia,bia@x.com\n"

    result = import_csv_content(content, 9, storage)

    assert result.imported_leads == 2
    assert result.error_leads == 1
    assert [lead.name for lead in storage.saved] == ["Ana", "Bia"]


def test_duplicate_phones_are_skipped(storage):
    content = "nome,telefone\nAna,43991142751\nAna B,(43) 99114-2751\nBia,\nCris,\n"

    result = import_csv_content(content, 2, storage)

    assert result.imported_leads == 3
    assert result.duplicate_leads == 1
    assert result.error_leads == 0
    assert result.message == "Import complete: 3 leads added, 1 duplicates skipped, 0 errors"


def test_deduplication_can_be_disabled(storage):
    content = "nome,telefone\nAna,43991142751\nAna B,43991142751\n"

    result = import_csv_content(content, 2, storage, ImporterConfig(deduplicate=False))

    assert result.imported_leads == 2
    assert result.duplicate_leads == 0


def test_duplicates_are_scoped_to_the_search(storage):
    content = "nome,telefone\nAna,43991142751\n"

    import_csv_content(content, 1, storage)
    result = import_csv_content(content, 2, storage)

    assert result.imported_leads == 1


def test_unrecognised_headers_still_import(storage):
    content = "Col1,Col2,Col3\nAna,ana@x.com,043991142751\n"

    result = import_csv_content(content, 4, storage)

    assert result.imported_leads == 1
    (lead,) = storage.get_results_by_search(4)
    assert lead.name == "Ana"
    assert lead.email == "ana@x.com"
    assert lead.phone == "5543991142751"


def test_short_rows_are_tolerated(storage):
    content = "nome,email,telefone\nAna\n"

    result = import_csv_content(content, 6, storage)

    assert result.imported_leads == 1
    (lead,) = storage.get_results_by_search(6)
    assert lead.email is None


def test_header_only_file_is_reported_as_empty(storage):
    result = import_csv_content("nome;email;telefone\n", 1, storage)

    assert result.imported_leads == 0
    assert result.error_leads == 0
    assert result.message == EMPTY_FILE_MESSAGE


def test_process_table_requires_a_data_row(storage):
    assert process_table([["nome"]], 1, storage).message == EMPTY_FILE_MESSAGE
    assert process_table([], 1, storage).imported_leads == 0


def test_default_type_applies_when_no_type_column(storage):
    table = [["Nome", "Tipo"], ["Ana", ""], ["Bia", "Padaria"]]

    process_table(table, 8, storage, default_type="excel-import")

    ana, bia = storage.get_results_by_search(8)
    assert ana.type == "excel-import"
    assert bia.type == "Padaria"


def test_split_city_state():
    assert split_city_state("São Paulo - SP", ":-/|,") == ("São Paulo", "SP")
    assert split_city_state("Recife/PE", ":-/|,") == ("Recife", "PE")
    assert split_city_state("Curitiba", ":-/|,") == ("Curitiba", "")
