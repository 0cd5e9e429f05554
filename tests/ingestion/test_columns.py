import pytest

from lead_importer.config import ImporterConfig
from lead_importer.ingestion.columns import (
    find_column_index,
    numeric_suffix_strategy,
    resolve_column_mapping,
    split_tokens,
    token_match,
)
from lead_importer.models import NOT_FOUND, FieldKind


@pytest.fixture()
def portuguese_headers():
    return ["Nome", "E-mail", "Telefone", "Cidade/UF"]


def test_resolves_accented_portuguese_headers(portuguese_headers):
    assert find_column_index(portuguese_headers, FieldKind.NAME) == 0
    assert find_column_index(portuguese_headers, FieldKind.EMAIL) == 1
    assert find_column_index(portuguese_headers, FieldKind.PHONE) == 2
    assert find_column_index(portuguese_headers, FieldKind.CITY) == 3
    assert find_column_index(portuguese_headers, FieldKind.STATE) == 3


def test_mapping_shares_combined_city_state_column(portuguese_headers):
    mapping = resolve_column_mapping(portuguese_headers)

    assert mapping.get(FieldKind.NAME) == 0
    assert mapping.get(FieldKind.EMAIL) == 1
    assert mapping.get(FieldKind.PHONE) == 2
    assert mapping.get(FieldKind.CITY) == 3
    assert mapping.get(FieldKind.STATE) == 3
    assert mapping.combined_city_state
    assert mapping.get(FieldKind.ADDRESS) == NOT_FOUND
    assert not mapping.forced


def test_exact_match_beats_containment():
    headers = ["Telefone Comercial", "Telefone"]

    assert find_column_index(headers, FieldKind.PHONE) == 1


def test_alias_order_beats_header_order():
    headers = ["fone fixo", "telefone celular"]

    assert find_column_index(headers, FieldKind.PHONE) == 1


def test_accents_and_case_are_ignored():
    assert find_column_index(["ID", " ENDEREÇO "], FieldKind.ADDRESS) == 1
    assert find_column_index(["id", "Município"], FieldKind.CITY) == 1


def test_prefix_similarity_catches_typos():
    assert find_column_index(["Nome", "Muncipio"], FieldKind.CITY) == 1


def test_unknown_field_returns_not_found():
    assert find_column_index(["foo", "bar"], FieldKind.EMAIL) == NOT_FOUND


def test_token_match_splits_compound_headers():
    headers = [(0, "dados"), (1, "tel/cel")]

    assert token_match(headers, ["celular"]) == 1
    assert split_tokens("endereco comercial") == ["endereco", "comercial"]
    assert split_tokens("tel/cel_2") == ["tel", "cel", "2"]


def test_numeric_suffix_strategy_matches_numbered_phone_columns():
    strategy = numeric_suffix_strategy([r"tel\s*[0-9]"])

    assert strategy([(0, "nome"), (1, "tel 2")], []) == 1
    assert strategy([(0, "nome"), (1, "hotel")], []) is None


def test_numeric_suffix_is_the_last_phone_strategy():
    config = ImporterConfig(field_aliases={FieldKind.PHONE: ("whatsapp",)})

    assert find_column_index(["Nome", "Fone2"], FieldKind.PHONE, config) == 1


def test_claimed_columns_are_not_reused():
    headers = ["Contato", "Whats"]

    assert find_column_index(headers, FieldKind.PHONE) == 0

    mapping = resolve_column_mapping(headers)
    assert mapping.get(FieldKind.NAME) == 0
    assert mapping.get(FieldKind.PHONE) == 1


def test_two_letter_headers_do_not_match_inside_longer_aliases():
    mapping = resolve_column_mapping(["ID", "Nome", "Cidade - UF"])

    assert mapping.get(FieldKind.NAME) == 1
    assert mapping.get(FieldKind.CITY) == 2
    assert mapping.get(FieldKind.STATE) == 2
    assert mapping.combined_city_state


def test_unrecognised_headers_force_positional_mapping():
    mapping = resolve_column_mapping(["Col1", "Col2", "Col3"])

    assert mapping.forced
    assert mapping.get(FieldKind.NAME) == 0
    assert mapping.get(FieldKind.EMAIL) == 1
    assert mapping.get(FieldKind.PHONE) == 2


def test_forced_mapping_skips_missing_columns():
    mapping = resolve_column_mapping(["foo", "bar"])

    assert mapping.forced
    assert mapping.get(FieldKind.NAME) == 0
    assert mapping.get(FieldKind.EMAIL) == 1
    assert mapping.get(FieldKind.PHONE) == NOT_FOUND


def test_blank_headers_do_not_match_everything():
    mapping = resolve_column_mapping(["", "Email"])

    assert mapping.get(FieldKind.EMAIL) == 1
    assert mapping.get(FieldKind.NAME) == NOT_FOUND
    assert not mapping.forced
