import pandas as pd
import pytest

from lead_importer.ingestion.exporters import LEAD_COLUMNS, export_leads, leads_to_dataframe
from lead_importer.models import LeadRecord


def _build_sample_leads():
    return [
        LeadRecord(
            search_id=1,
            id=1,
            name="João Silva",
            email="joao@x.com",
            phone="5543991142751",
            city="São Paulo",
            state="SP",
        ),
        LeadRecord(search_id=1, id=2, name="Maria", email="maria@x.com"),
    ]


def test_leads_to_dataframe_uses_storage_column_names():
    dataframe = leads_to_dataframe(_build_sample_leads())

    assert list(dataframe.columns) == LEAD_COLUMNS
    assert dataframe.loc[0, "cidade"] == "São Paulo"
    assert dataframe.loc[0, "estado"] == "SP"


def test_empty_export_keeps_header():
    assert list(leads_to_dataframe([]).columns) == LEAD_COLUMNS


def test_export_leads_to_csv_and_excel(tmp_path):
    leads = _build_sample_leads()

    csv_path = tmp_path / "out" / "leads.csv"
    excel_path = tmp_path / "leads.xlsx"

    export_leads(leads, csv_path)
    export_leads(leads, excel_path)

    csv_frame = pd.read_csv(csv_path, dtype=str)
    excel_frame = pd.read_excel(excel_path, dtype=str)

    assert csv_frame.loc[0, "name"] == "João Silva"
    assert csv_frame.loc[0, "phone"] == "5543991142751"
    assert excel_frame.loc[1, "email"] == "maria@x.com"


def test_export_rejects_unknown_extension(tmp_path):
    with pytest.raises(ValueError):
        export_leads(_build_sample_leads(), tmp_path / "leads.json")
