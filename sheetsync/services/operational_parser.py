# sheetsync/services/operational_parser.py
#
# Daily operational workbook: one tab per brand with per-channel daily
# sales, plus an "Ads" tab and a "General" monthly summary tab.
#
# Row indexes below are relative to the fetched range A3:..., so index 0 is
# sheet row 3.

from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from sheetsync.core.errors import StructuralMismatch
from sheetsync.core.logger import logger
from sheetsync.core.mapping import (
    CHANNEL_MERGE,
    CHANNELS,
    MP_ADMIN_CHANNELS,
    NET_AFTER_MKT_CHANNELS,
    SKU_SHEETS,
)
from sheetsync.models.schema import (
    DailyAdsRecord,
    DailyChannelRecord,
    DailyProductSummary,
    MonthlyProductSummary,
    OperationalParseResult,
    Period,
)
from sheetsync.services.coercion import decode_date, to_number
from sheetsync.services.product_lookup import ProductLookup
from sheetsync.services.sheets_client import SERIAL_NUMBER


SKU_RANGE = "'{sheet}'!A3:AI120"
ADS_RANGE = "Ads!B3:I2000"
GENERAL_RANGE = "General!B2:K15"

DATE_ROW = 0
DATE_START_COL = 3

NET_SALES_ROW = 28        # sheet rows 31-41
GROSS_PROFIT_ROW = 54     # sheet rows 57-67
MKT_COST_ROWS = range(67, 79)   # sheet rows 70-81

LAYOUT_ANCHOR_ROW = 80    # sheet row 83
LAYOUT_ANCHOR_COLS = (1, 2)


# ---------------- Layout detection ----------------

class SheetLayout(str, Enum):
    WITH_ADMIN_FEE = "with_admin_fee"
    WITHOUT_ADMIN_FEE = "without_admin_fee"


class LayoutOffsets(NamedTuple):
    admin_fee_row: Optional[int]
    net_after_mkt_row: int


def _cell(rows, r, c):

    if r >= len(rows):
        return None

    row = rows[r] or []

    if c >= len(row):
        return None

    return row[c]


def detect_layout(rows) -> SheetLayout:
    """
    Newer sheets insert a "Biaya Adm Marketplace" block at sheet row 83,
    which pushes the net-after-marketing block down.
    """

    anchor = " ".join(
        str(_cell(rows, LAYOUT_ANCHOR_ROW, c) or "") for c in LAYOUT_ANCHOR_COLS
    ).lower()

    if "adm" in anchor and "marketplace" in anchor:
        return SheetLayout.WITH_ADMIN_FEE

    return SheetLayout.WITHOUT_ADMIN_FEE


def layout_offsets(layout: SheetLayout) -> LayoutOffsets:

    if layout == SheetLayout.WITH_ADMIN_FEE:
        # admin fee rows 84-87, net after mkt rows 90-101
        return LayoutOffsets(admin_fee_row=81, net_after_mkt_row=87)

    # net after mkt rows 84-95
    return LayoutOffsets(admin_fee_row=None, net_after_mkt_row=81)


# ---------------- Brand tabs ----------------

def sheet_dates(rows) -> List[Tuple[int, str]]:

    if not rows:
        return []

    date_row = rows[DATE_ROW] or []

    dates = []

    for col in range(DATE_START_COL, len(date_row)):

        d = decode_date(date_row[col])

        # Columns without a real date are dropped, never defaulted
        if d:
            dates.append((col, d))

    return dates


def parse_sku_rows(rows, product: str, dates=None):
    """
    Returns (daily product totals, daily channel records) for one brand tab.
    Raw channels are folded through CHANNEL_MERGE before they are emitted.
    """

    if dates is None:
        dates = sheet_dates(rows)

    layout = detect_layout(rows)
    offsets = layout_offsets(layout)

    logger.info(f"{product}: {len(dates)} dates, layout {layout.value}")

    daily_product = []
    daily_channel = []

    for col, date in dates:

        merged = {}

        total_net_sales = 0.0
        total_gp = 0.0
        total_mp_admin = 0.0

        for i, channel in enumerate(CHANNELS):

            net_sales = to_number(_cell(rows, NET_SALES_ROW + i, col))
            gp = to_number(_cell(rows, GROSS_PROFIT_ROW + i, col))

            mp_admin = 0.0

            if offsets.admin_fee_row is not None and channel in MP_ADMIN_CHANNELS:
                row = offsets.admin_fee_row + MP_ADMIN_CHANNELS[channel]
                mp_admin = abs(to_number(_cell(rows, row, col)))

            net_after_mkt = 0.0

            if channel in NET_AFTER_MKT_CHANNELS:
                row = offsets.net_after_mkt_row + NET_AFTER_MKT_CHANNELS.index(channel)
                net_after_mkt = to_number(_cell(rows, row, col))

            total_net_sales += net_sales
            total_gp += gp
            total_mp_admin += mp_admin

            resolved = CHANNEL_MERGE.get(channel, channel)

            acc = merged.setdefault(resolved, {
                "net_sales": 0.0,
                "gross_profit": 0.0,
                "mp_admin_cost": 0.0,
                "net_after_mkt": 0.0,
            })

            acc["net_sales"] += net_sales
            acc["gross_profit"] += gp
            acc["mp_admin_cost"] += mp_admin
            acc["net_after_mkt"] += net_after_mkt


        for channel, acc in merged.items():

            if acc["net_sales"] == 0 and acc["gross_profit"] == 0:
                continue

            daily_channel.append(DailyChannelRecord(
                date=date,
                product=product,
                channel=channel,
                **acc,
            ))


        total_mkt = sum(abs(to_number(_cell(rows, r, col))) for r in MKT_COST_ROWS)

        total_net_after_mkt = sum(
            to_number(_cell(rows, offsets.net_after_mkt_row + i, col))
            for i in range(len(NET_AFTER_MKT_CHANNELS))
        )

        mkt_cost = total_mkt + total_mp_admin

        if total_net_sales == 0 and total_gp == 0 and mkt_cost == 0:
            continue

        daily_product.append(DailyProductSummary(
            date=date,
            product=product,
            net_sales=round(total_net_sales),
            gross_profit=round(total_gp),
            net_after_mkt=round(total_net_after_mkt),
            mkt_cost=round(mkt_cost),
        ))

    return daily_product, daily_channel


# ---------------- Ads tab ----------------

def _str(row, col) -> str:

    if col >= len(row) or row[col] is None:
        return ""

    return str(row[col])


def parse_ads_rows(rows) -> List[DailyAdsRecord]:

    ads = []

    # first row is the header
    for row in rows[1:]:

        if not row or not row[0]:
            continue

        date = decode_date(row[0])

        if not date:
            continue

        ads.append(DailyAdsRecord(
            date=date,
            ad_account=_str(row, 1),
            spent=to_number(row[2] if len(row) > 2 else None),
            objective=_str(row, 3),
            source=_str(row, 4),
            store=_str(row, 6),
            advertiser=_str(row, 7),
        ))

    return ads


# ---------------- General tab ----------------

async def parse_general_rows(rows, lookup: ProductLookup) -> List[MonthlyProductSummary]:

    def num(row, col):
        return to_number(row[col] if col < len(row) else None)

    summary = []

    for row in rows[1:]:

        if not row or len(row) < 2 or not row[0] or not row[1]:
            continue

        if row[1] == "Total":
            break

        product = str(row[1]).strip()

        summary.append(MonthlyProductSummary(
            product=product,
            brand=await lookup.lookup(product),
            sales_after_disc=num(row, 2),
            sales_pct=num(row, 3) * 100,
            gross_profit=num(row, 4),
            gross_profit_pct=num(row, 5) * 100,
            gross_after_mkt=num(row, 6),
            gmp_real=num(row, 7) * 100,
            mkt_pct=num(row, 8) * 100,
            mkt_share_pct=num(row, 9) * 100,
        ))

    return summary


# ---------------- Whole workbook ----------------

async def parse_operational_sheet(reader, source_id, lookup: Optional[ProductLookup] = None) -> OperationalParseResult:
    """
    Parse every known brand tab plus Ads and General. Raises
    StructuralMismatch only when no brand tab yields a single date.
    """

    lookup = lookup or ProductLookup()

    names = set(await reader.sheet_names(source_id))

    period = None

    daily_product = []
    daily_channel = []
    ads = []
    monthly_summary = []


    if "General" in names:
        rows = await reader.get_range(source_id, GENERAL_RANGE, date_render=SERIAL_NUMBER)
        monthly_summary = await parse_general_rows(rows, lookup)


    for sheet, product in SKU_SHEETS.items():

        if sheet not in names:
            continue

        range_spec = SKU_RANGE.format(sheet=sheet.replace("'", "''"))

        rows = await reader.get_range(source_id, range_spec, date_render=SERIAL_NUMBER)

        dates = sheet_dates(rows)

        if not dates:
            logger.warning(f"No dates found on {sheet} tab, skipping")
            continue

        if period is None:
            year, month, _ = dates[0][1].split("-")
            period = Period(month=int(month), year=int(year))

        products, channels = parse_sku_rows(rows, product, dates)

        daily_product.extend(products)
        daily_channel.extend(channels)


    if "Ads" in names:
        rows = await reader.get_range(source_id, ADS_RANGE, date_render=SERIAL_NUMBER)
        ads = parse_ads_rows(rows)


    if period is None:
        raise StructuralMismatch("Could not detect period from sheet")

    logger.info(
        f"Parsed {source_id} for {period.year}-{period.month:02d}: "
        f"{len(daily_product)} product, {len(daily_channel)} channel, "
        f"{len(ads)} ads, {len(monthly_summary)} summary rows"
    )

    return OperationalParseResult(
        daily_product=daily_product,
        daily_channel=daily_channel,
        ads=ads,
        monthly_summary=monthly_summary,
        period=period,
    )
