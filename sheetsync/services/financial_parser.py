# sheetsync/services/financial_parser.py
#
# Label-driven parsers for the monthly report workbook: PL, CF and Rasio tabs.
# Each tab has a fixed layout; labels and month headers are matched loosely.

import re
from typing import List, Sequence

from sheetsync.core.errors import StructuralMismatch
from sheetsync.core.logger import logger
from sheetsync.core.mapping import CF_HEADINGS, RATIO_LABELS
from sheetsync.models.schema import (
    Benchmark,
    CFRow,
    FinancialParseResult,
    MonthColumn,
    PLRow,
    RatioRow,
)
from sheetsync.services.coercion import is_blank, to_number
from sheetsync.services.label_mapper import (
    PL_MAPPER,
    CashFlowContext,
    resolve_cash_flow,
)
from sheetsync.services.month_locator import locate_months
from sheetsync.services.sheets_client import FORMATTED_STRING


PL_RANGE = "PL!A1:AM60"
CF_RANGE = "CF!A1:AH143"
RATIO_RANGE = "Rasio!A1:P25"

CF_LAST_ROW = 143


# ---------------- Helpers ----------------

def _cell(row, col):

    if row is None or col >= len(row):
        return None

    return row[col]


def _text(row, col) -> str:

    val = _cell(row, col)

    if val is None:
        return ""

    return str(val).strip()


def _month_columns(data, header_idx, start, sheet, min_rows) -> List[MonthColumn]:

    if not data or len(data) < min_rows:
        raise StructuralMismatch(f"{sheet} sheet is empty or too short")

    header = data[header_idx] or []

    months = list(locate_months(header, start))

    if not months:
        raise StructuralMismatch(f"No month headers found in {sheet} sheet")

    logger.info(f"{sheet}: {len(months)} month columns")

    return months


# ---------------- PL ----------------

def parse_pl_rows(data: Sequence[Sequence]) -> List[PLRow]:

    months = _month_columns(data, header_idx=3, start=0, sheet="PL", min_rows=8)

    first_col = months[0].column

    results = []

    for row in data[6:]:

        row = row or []

        label = _text(row, 1)

        if not label:
            continue

        # Section header rows ("Penjualan") repeat data labels but carry no values
        if is_blank(_cell(row, first_col)):
            continue

        mapping = PL_MAPPER.resolve(label)

        if mapping is None:
            continue

        for m in months:

            pct_sales = _cell(row, m.column + 1)
            pct_net_sales = _cell(row, m.column + 2)

            results.append(PLRow(
                month=m.month.key,
                line_item=mapping.key,
                line_item_label=label,
                section=mapping.section,
                amount=to_number(_cell(row, m.column)),
                pct_sales=None if pct_sales is None else to_number(pct_sales),
                pct_net_sales=None if pct_net_sales is None else to_number(pct_net_sales),
            ))

    return results


# ---------------- CF ----------------

def _cf_label(row) -> str:

    # Indented items sit in column C, top level items in column B
    for col in (2, 1):

        val = _cell(row, col)

        if isinstance(val, str) and val.strip():
            return val.strip()

    return ""


def _is_cf_heading(label: str) -> bool:
    return any(label.startswith(h) for h in CF_HEADINGS)


def parse_cf_rows(data: Sequence[Sequence]) -> List[CFRow]:

    months = _month_columns(data, header_idx=3, start=0, sheet="CF", min_rows=9)

    first_col = months[0].column

    results = []
    context = CashFlowContext()

    for row in data[4:CF_LAST_ROW]:

        row = row or []

        label = _cf_label(row)

        if not label:
            continue

        context = context.advance(label)

        if _is_cf_heading(label):
            continue

        if is_blank(_cell(row, first_col)):
            continue

        mapping = resolve_cash_flow(label, context)

        if mapping is None:
            continue

        for m in months:

            results.append(CFRow(
                month=m.month.key,
                section=mapping.section,
                line_item=mapping.key,
                line_item_label=label,
                sub_section=mapping.sub_section or "other",
                amount=to_number(_cell(row, m.column)),
            ))

    return results


# ---------------- Rasio ----------------

_BENCHMARK = re.compile(r"([\d.]+)%?\s*-\s*([\d.]+)%?")


def parse_benchmark(val) -> Benchmark:
    """
    "50% - 70%" -> 0.5 / 0.7, "1.2 - 2.0" -> 1.2 / 2.0.

    Percent ranges above 1 are scaled to fractions; the health checks
    downstream compare against decimal ratios.
    """

    if not val or not isinstance(val, str):
        return Benchmark()

    m = _BENCHMARK.search(val)

    if not m:
        return Benchmark()

    try:
        low = float(m.group(1))
        high = float(m.group(2))
    except ValueError:
        return Benchmark()

    if "%" in val and low > 1:
        low = low / 100
        high = high / 100

    return Benchmark(min=low, max=high)


def _ratio_mapping(label: str):

    lower = label.lower()

    for prefix, key, category in RATIO_LABELS:

        if lower.startswith(prefix):
            return key, category

    return None


def parse_ratio_rows(data: Sequence[Sequence]) -> List[RatioRow]:

    months = _month_columns(data, header_idx=2, start=3, sheet="Rasio", min_rows=6)

    results = []

    for row in data[3:]:

        row = row or []

        label = _text(row, 1)

        if not label:
            continue

        mapping = _ratio_mapping(label)

        if mapping is None:
            continue

        key, category = mapping

        benchmark_label = _text(row, 2)
        benchmark = parse_benchmark(benchmark_label)

        for m in months:

            raw = _cell(row, m.column)
            value = to_number(raw)

            if value == 0 and not raw:
                continue

            results.append(RatioRow(
                month=m.month.key,
                ratio_name=key,
                ratio_label=label,
                category=category,
                value=value,
                benchmark_min=benchmark.min,
                benchmark_max=benchmark.max,
                benchmark_label=benchmark_label or None,
            ))

    return results


# ---------------- Fetch + parse ----------------

async def parse_pl(reader, source_id) -> List[PLRow]:
    data = await reader.get_range(source_id, PL_RANGE, date_render=FORMATTED_STRING)
    return parse_pl_rows(data)


async def parse_cf(reader, source_id) -> List[CFRow]:
    data = await reader.get_range(source_id, CF_RANGE, date_render=FORMATTED_STRING)
    return parse_cf_rows(data)


async def parse_ratios(reader, source_id) -> List[RatioRow]:
    data = await reader.get_range(source_id, RATIO_RANGE, date_render=FORMATTED_STRING)
    return parse_ratio_rows(data)


async def parse_financial_report(reader, source_id) -> FinancialParseResult:
    """
    Parse all three statements. Never raises: a statement that fails is
    reported in `errors` and the others still come back.
    """

    result = FinancialParseResult()

    statements = [
        ("PL", "pl", parse_pl),
        ("CF", "cf", parse_cf),
        ("Rasio", "ratios", parse_ratios),
    ]

    for name, field, parser in statements:

        try:
            setattr(result, field, await parser(reader, source_id))

        except Exception as e:

            logger.warning(f"{name} parse error for {source_id}: {e}")

            result.errors.append(f"{name} parse error: {e}")


    months = set()

    for rows in (result.pl, result.cf, result.ratios):
        months.update(r.month for r in rows)

    result.months_found = sorted(months)

    logger.info(
        f"Parsed {source_id}: PL {len(result.pl)}, CF {len(result.cf)}, "
        f"Rasio {len(result.ratios)} rows over {len(months)} months"
    )

    return result
