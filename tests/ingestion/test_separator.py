from lead_importer.ingestion.separator import detect_separator


def test_semicolon_detected_from_first_data_line():
    content = "nome,email\nJoão;joao@x.com;43991142751\n"

    assert detect_separator(content) == ";"


def test_comma_wins_when_it_splits_into_more_fields():
    content = "nome;obs\nJoão;a,b,c\n"

    assert detect_separator(content) == ","


def test_plain_comma_file():
    assert detect_separator("name,email\nAda,ada@example.com") == ","


def test_single_line_defaults_to_comma():
    assert detect_separator("nome;email;telefone") == ","
    assert detect_separator("") == ","
