from collections import defaultdict

import pytest
from openpyxl.utils.cell import range_boundaries

from sheetsync.core.errors import PersistenceFailure, SourceUnavailable
from sheetsync.services.product_lookup import clear_product_mapping_cache
from sheetsync.services.sheets_client import split_range


# ---------------- Fakes ----------------

class FakeStore:
    """In-memory stand-in for SupabaseStore."""

    def __init__(self, tables=None, fail_on=()):
        self.tables = defaultdict(list)
        for name, rows in (tables or {}).items():
            self.tables[name] = [dict(r) for r in rows]
        self.fail_on = set(fail_on)
        self.calls = []

    def _record(self, action, table):
        self.calls.append((action, table))
        if (action, table) in self.fail_on:
            raise PersistenceFailure(f"{action.capitalize()} {table}: simulated failure")

    @staticmethod
    def _matches(row, eq=None, gte=None, lte=None):
        for col, val in (eq or {}).items():
            if row.get(col) != val:
                return False
        for col, val in (gte or {}).items():
            if row.get(col) is None or row[col] < val:
                return False
        for col, val in (lte or {}).items():
            if row.get(col) is None or row[col] > val:
                return False
        return True

    async def select(self, table, columns="*", eq=None, gte=None, lte=None, order=None):
        self._record("select", table)
        return [dict(r) for r in self.tables[table] if self._matches(r, eq, gte, lte)]

    async def delete_where(self, table, eq=None, gte=None, lte=None):
        self._record("delete", table)
        self.tables[table] = [
            r for r in self.tables[table] if not self._matches(r, eq, gte, lte)
        ]

    async def insert_batch(self, table, rows, batch_size):
        for i in range(0, len(rows), batch_size):
            self._record("insert", table)
            self.tables[table].extend(dict(r) for r in rows[i:i + batch_size])
        return len(rows)

    async def upsert(self, table, rows, on_conflict):
        self._record("upsert", table)
        keys = on_conflict.split(",")
        for row in rows if isinstance(rows, list) else [rows]:
            key = {k: row.get(k) for k in keys}
            self.tables[table] = [
                r for r in self.tables[table] if not self._matches(r, eq=key)
            ]
            self.tables[table].append(dict(row))

    async def update(self, table, values, eq):
        self._record("update", table)
        for row in self.tables[table]:
            if self._matches(row, eq=eq):
                row.update(values)


class FakeSheetReader:
    """Serves A1-anchored grids: {spreadsheet_id: {tab: rows}}."""

    def __init__(self, workbooks):
        self.workbooks = workbooks
        self.requests = []

    def _book(self, source_id):
        if source_id not in self.workbooks:
            raise SourceUnavailable(
                f"Spreadsheet {source_id} not found. "
                f"Make sure it is shared with the service account email."
            )
        return self.workbooks[source_id]

    async def sheet_names(self, source_id):
        return list(self._book(source_id))

    async def get_range(self, source_id, range_spec, date_render=None):
        self.requests.append((source_id, range_spec, date_render))
        book = self._book(source_id)
        sheet, cells = split_range(range_spec)
        if sheet not in book:
            raise SourceUnavailable(f"Unable to parse range: {range_spec}")
        min_col, min_row, max_col, max_row = range_boundaries(cells)
        out = []
        for row in book[sheet][min_row - 1:max_row]:
            out.append(list(row[min_col - 1:max_col]))
        return out


# ---------------- Grid builders ----------------

def make_grid(cells, n_rows=None):
    """{(row, col): value} with 0-based indexes -> ragged list of rows."""

    if n_rows is None:
        n_rows = max(r for r, _ in cells) + 1 if cells else 0

    rows = [[] for _ in range(n_rows)]

    for (r, c), val in cells.items():
        row = rows[r]
        while len(row) <= c:
            row.append("")
        row[c] = val

    return rows


def offset_grid(rows, row_offset=0, col_offset=0):
    """Shift a grid so that its (0, 0) lands at (row_offset, col_offset)."""

    return [[] for _ in range(row_offset)] + [
        [""] * col_offset + list(row) for row in rows
    ]


def pl_grid():
    return make_grid({
        (3, 2): "Nov 2025", (3, 5): "Des 2025",
        (6, 1): "Penjualan",
        (7, 1): "Penjualan", (7, 2): 1000000, (7, 3): 1, (7, 4): 1.1,
        (7, 5): "1.200.000", (7, 6): 1, (7, 7): 1.05,
        (8, 1): "Penjualan Bersih", (8, 2): 900000, (8, 5): 1100000,
        (9, 1): "Biaya Konsultan Baru", (9, 2): "-", (9, 5): 25000,
    })


def cf_grid():
    return make_grid({
        (3, 3): "Desember 2025",
        (4, 1): "ARUS KAS DARI AKTIVITAS OPERASI",
        (5, 2): "Penerimaan dari Pelanggan", (5, 3): 500,
        (6, 1): "Pembayaran Uang Muka",
        (7, 2): "Inventory", (7, 3): -100,
        (8, 1): "Pembayaran Kepada Pemasok",
        (9, 2): "Inventory", (9, 3): -200,
        (10, 2): "Biaya Gudang Baru", (10, 3): -50,
        (11, 1): "ARUS KAS DARI AKTIVITAS INVESTASI",
        (12, 2): "Lainnya", (12, 3): 10,
    })


def ratio_grid():
    return make_grid({
        (2, 3): "Nov 2025", (2, 4): "Dec 2025",
        (3, 1): "Gross Profit (Loss) Margin", (3, 2): "50% - 70%", (3, 3): 0.55, (3, 4): "",
        (4, 1): "Current Ratio", (4, 2): "1.2 - 2.0", (4, 3): 1.5, (4, 4): 1.7,
    }, n_rows=6)


def sku_rows(admin_fee=True):
    """Brand tab as fetched from A3: index 0 is sheet row 3."""

    cells = {
        (0, 3): 46000, (0, 4): 46001, (0, 5): "Total",
        # net sales: Shopee, TikTok Ads, TikTok Shop
        (32, 3): 200, (33, 3): 100, (34, 3): 50,
        # gross profit
        (58, 3): 80, (59, 3): 30, (60, 3): 20,
        # marketing cost
        (67, 3): -25,
    }

    if admin_fee:
        cells.update({
            (80, 1): "Biaya Adm Marketplace",
            (81, 3): -10, (82, 3): -5,
            (92, 3): 70, (93, 3): 40, (94, 3): 15,
        })
    else:
        cells.update({
            (80, 1): "Laba/(Rugi) Kotor Setelah Biaya Marketing",
            (86, 3): 70, (87, 3): 40, (88, 3): 15,
        })

    return make_grid(cells, n_rows=118)


def ads_rows():
    """Ads tab as fetched from B3."""

    return [
        ["Date", "Ad Account", "Spent", "Objective", "Source", "", "Store", "Advertiser"],
        [46000, "Roove CPAS", 1500, "Sales", "Shopee CPAS", "", "Roove Store", "Budi"],
        [46000, "Roove Meta", 0, "Sales", "Facebook", "", "Roove Store", "Sari"],
        ["not a date", "Broken", 5],
        [],
    ]


def general_rows():
    """General tab as fetched from B2."""

    return [
        ["No", "SKU", "Sales"],
        [1, "Roove Blueberry", 1000, 0.5, 400, 0.4, 300, 0.3, 0.1, 0.6],
        [2, "Mystery Bundle", 500, 0.25, 100, 0.2, 50, 0.1, 0.05, 0.2],
        [3, "Total", 1500],
        [4, "After Total", 1],
    ]


def financial_book():
    return {"PL": pl_grid(), "CF": cf_grid(), "Rasio": ratio_grid()}


def operational_book():
    return {
        "General": offset_grid(general_rows(), 1, 1),
        "Roove": offset_grid(sku_rows(), 2, 0),
        "Ads": offset_grid(ads_rows(), 2, 1),
    }


# ---------------- Fixtures ----------------

@pytest.fixture(autouse=True)
def fresh_product_cache():
    clear_product_mapping_cache()
    yield
    clear_product_mapping_cache()


@pytest.fixture
def store():
    return FakeStore()
