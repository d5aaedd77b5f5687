from datetime import date
from itertools import permutations

import pytest

from funnel_dashboard.mapper import map_row, normalize_header, parse_sheet_date, resolve_columns
from funnel_dashboard.models import DataPoint

CANONICAL_ROW = {
    "data": "2024-03-01",
    "investimento": "R$ 1.500,00",
    "impressões": "15000",
    "cliques": "450",
    "leads": "85",
    "conversas": "42",
    "negociações": "15",
    "vendas": "8",
    "receita": "12.000,00",
}

EXPECTED = DataPoint(
    date=date(2024, 3, 1),
    investment=1500.0,
    impressions=15000,
    clicks=450,
    leads=85,
    conversations=42,
    negotiations=15,
    sales=8,
    revenue=12000.0,
)


def test_maps_portuguese_headers():
    mapping = map_row(list(CANONICAL_ROW), list(CANONICAL_ROW.values()))
    assert mapping.data_point == EXPECTED
    assert mapping.warnings == []


def test_header_order_does_not_matter():
    items = list(CANONICAL_ROW.items())[:5]
    results = set()
    for ordering in permutations(items):
        header = [label for label, _ in ordering]
        row = [value for _, value in ordering]
        results.add(map_row(header, row).data_point)
    assert len(results) == 1


@pytest.mark.parametrize(
    "labels",
    [
        ["Data", "Impressões", "Reuniões", "Negociações", "Visualizações"],
        ["DATA", "impressoes", "reunioes", "negociacoes", "visualizacoes"],
        [" data ", "IMPRESSOES", "Reunioes", "NEGOCIAÇÕES", "page_views"],
        ["\ufeffdata", "Impressions", "meetings", "negotiations", "Page_Views"],
    ],
)
def test_headers_match_case_and_diacritics_insensitively(labels):
    mapping = map_row(labels, ["2024-03-02", "1000", "3", "2", "250"])
    assert mapping.data_point == DataPoint(
        date=date(2024, 3, 2), impressions=1000, meetings=3, negotiations=2, page_views=250
    )


def test_decomposed_unicode_header_is_recognised():
    decomposed = "Impresso\u0303es"
    assert normalize_header(decomposed) == "impressoes"


def test_unknown_headers_are_ignored():
    mapping = map_row(["data", "campanha", "cliques", "observação"], ["2024-03-03", "Verão", "12", "ok"])
    assert mapping.data_point == DataPoint(date=date(2024, 3, 3), clicks=12)
    assert mapping.warnings == []


def test_quiz_and_checkout_columns():
    header = ["data", "visualizacoes", "sales_page_views", "checkouts", "vendas"]
    mapping = map_row(header, ["2024-03-04", "900", "300", "40", "12"])
    assert mapping.data_point == DataPoint(
        date=date(2024, 3, 4), page_views=900, sales_page_views=300, checkouts=40, sales=12
    )


@pytest.mark.parametrize("raw_date", ["", "   ", "amanhã", "2024-13-40"])
def test_rows_without_a_resolvable_date_are_rejected(raw_date):
    mapping = map_row(["data", "cliques"], [raw_date, "10"])
    assert mapping.rejected
    assert mapping.data_point is None
    assert mapping.warnings[-1].field == "date"


def test_row_without_date_column_is_rejected():
    mapping = map_row(["cliques", "leads"], ["10", "2"])
    assert mapping.rejected
    assert mapping.warnings[-1].reason == "missing"


def test_short_rows_default_missing_cells_to_zero():
    mapping = map_row(["data", "cliques", "leads"], ["2024-03-05"])
    assert mapping.data_point == DataPoint(date=date(2024, 3, 5))
    assert mapping.warnings == []


def test_bad_cells_default_to_zero_with_warnings():
    mapping = map_row(["data", "investimento", "cliques"], ["2024-03-06", "grátis", "muitos"])
    assert mapping.data_point == DataPoint(date=date(2024, 3, 6))
    assert {(w.field, w.reason) for w in mapping.warnings} == {
        ("investment", "defaulted"),
        ("clicks", "defaulted"),
    }


def test_duplicate_header_uses_first_column():
    assert resolve_columns(["data", "cliques", "Cliques"]) == {0: "date", 1: "clicks"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-01-31", date(2024, 1, 31)),
        ("31/01/2024", date(2024, 1, 31)),
        ("31/01/24", date(2024, 1, 31)),
        ("31-01-2024", date(2024, 1, 31)),
        ("", None),
        ("01/31/2024", None),
    ],
)
def test_parse_sheet_date(raw, expected):
    assert parse_sheet_date(raw) == expected
