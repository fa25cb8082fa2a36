import asyncio

import pytest

from sheetsync.core.errors import StructuralMismatch
from sheetsync.services.financial_parser import (
    parse_benchmark,
    parse_cf_rows,
    parse_financial_report,
    parse_pl_rows,
    parse_ratio_rows,
)
from sheetsync.services.sheets_client import FORMATTED_STRING

from conftest import (
    FakeSheetReader,
    cf_grid,
    financial_book,
    make_grid,
    pl_grid,
    ratio_grid,
)


# ---------------- PL ----------------

def test_pl_rows_per_label_and_month():
    rows = parse_pl_rows(pl_grid())

    assert len(rows) == 6
    assert {r.month for r in rows} == {"2025-11-01", "2025-12-01"}

    by_key = {(r.line_item, r.month): r for r in rows}

    nov = by_key[("penjualan", "2025-11-01")]
    assert nov.amount == 1000000
    assert nov.section == "revenue"
    assert nov.pct_sales == 1
    assert nov.pct_net_sales == pytest.approx(1.1)

    assert by_key[("penjualan", "2025-12-01")].amount == 1200000


def test_pl_section_header_without_values_is_skipped():
    rows = parse_pl_rows(pl_grid())
    assert len([r for r in rows if r.line_item == "penjualan"]) == 2


def test_pl_missing_percent_cells_are_none():
    rows = parse_pl_rows(pl_grid())

    dec = next(r for r in rows
               if r.line_item == "penjualan_bersih" and r.month == "2025-12-01")

    assert dec.pct_sales is None
    assert dec.pct_net_sales is None


def test_pl_unknown_label_kept_under_other():
    rows = parse_pl_rows(pl_grid())

    extra = [r for r in rows if r.line_item == "biaya_konsultan_baru"]

    assert {r.section for r in extra} == {"other"}
    assert {r.month: r.amount for r in extra} == {"2025-11-01": 0, "2025-12-01": 25000}


def test_pl_without_month_headers():
    data = make_grid({(3, 1): "Keterangan", (7, 1): "Penjualan", (7, 2): 10})

    with pytest.raises(StructuralMismatch, match="No month headers found in PL sheet"):
        parse_pl_rows(data)


def test_pl_too_short():
    with pytest.raises(StructuralMismatch, match="PL sheet is empty or too short"):
        parse_pl_rows([["x"], ["y"]])


# ---------------- CF ----------------

def test_cf_parent_disambiguation():
    rows = parse_cf_rows(cf_grid())

    keys = [r.line_item for r in rows]

    assert keys == [
        "penerimaan_pelanggan",
        "uang_muka_inventory",
        "pemasok_inventory",
        "pemasok_biaya_gudang_baru",
        "lainnya",
    ]

    amounts = {r.line_item: r.amount for r in rows}
    assert amounts["uang_muka_inventory"] == -100
    assert amounts["pemasok_inventory"] == -200


def test_cf_headings_are_not_emitted():
    rows = parse_cf_rows(cf_grid())

    labels = {r.line_item_label for r in rows}

    assert "Pembayaran Uang Muka" not in labels
    assert not any(label.startswith("ARUS KAS DARI") for label in labels)


def test_cf_unknown_label_sub_section():
    rows = parse_cf_rows(cf_grid())

    row = next(r for r in rows if r.line_item == "pemasok_biaya_gudang_baru")

    assert row.section == "operasi"
    assert row.sub_section == "pemasok"
    assert row.month == "2025-12-01"


# ---------------- Rasio ----------------

@pytest.mark.parametrize("raw, low, high", [
    ("50% - 70%", 0.5, 0.7),
    ("5% - 10%", 0.05, 0.1),
    ("1.2 - 2.0", 1.2, 2.0),
    ("0.5 - 1", 0.5, 1.0),
])
def test_parse_benchmark(raw, low, high):
    benchmark = parse_benchmark(raw)
    assert benchmark.min == pytest.approx(low)
    assert benchmark.max == pytest.approx(high)


@pytest.mark.parametrize("raw", [None, "", "n/a", 1.5])
def test_parse_benchmark_without_range(raw):
    benchmark = parse_benchmark(raw)
    assert benchmark.min is None
    assert benchmark.max is None


def test_ratio_rows():
    rows = parse_ratio_rows(ratio_grid())

    assert [(r.ratio_name, r.month) for r in rows] == [
        ("gpm", "2025-11-01"),
        ("current_ratio", "2025-11-01"),
        ("current_ratio", "2025-12-01"),
    ]

    gpm = rows[0]
    assert gpm.category == "rasio_usaha"
    assert gpm.value == pytest.approx(0.55)
    assert gpm.benchmark_min == pytest.approx(0.5)
    assert gpm.benchmark_max == pytest.approx(0.7)
    assert gpm.benchmark_label == "50% - 70%"


# ---------------- Whole report ----------------

def test_financial_report_collects_all_statements():
    reader = FakeSheetReader({"fin-1": financial_book()})

    result = asyncio.run(parse_financial_report(reader, "fin-1"))

    assert result.errors == []
    assert len(result.pl) == 6
    assert len(result.cf) == 5
    assert len(result.ratios) == 3
    assert result.months_found == ["2025-11-01", "2025-12-01"]
    assert {r[2] for r in reader.requests} == {FORMATTED_STRING}


def test_broken_statement_is_reported_not_raised():
    book = financial_book()
    book["CF"] = make_grid({(3, 1): "Keterangan"}, n_rows=12)

    reader = FakeSheetReader({"fin-1": book})

    result = asyncio.run(parse_financial_report(reader, "fin-1"))

    assert len(result.pl) == 6
    assert result.cf == []
    assert len(result.errors) == 1
    assert result.errors[0].startswith("CF parse error")
    assert "No month headers found in CF sheet" in result.errors[0]


def test_missing_tab_is_reported():
    book = financial_book()
    del book["Rasio"]

    reader = FakeSheetReader({"fin-1": book})

    result = asyncio.run(parse_financial_report(reader, "fin-1"))

    assert result.ratios == []
    assert [e.split(":")[0] for e in result.errors] == ["Rasio parse error"]


def test_pl_duplicate_month_columns_both_kept():
    data = pl_grid()
    data[3][5] = "Nov 2025"

    rows = parse_pl_rows(data)

    penjualan = [(r.month, r.amount) for r in rows if r.line_item == "penjualan"]

    assert penjualan == [("2025-11-01", 1000000), ("2025-11-01", 1200000)]
