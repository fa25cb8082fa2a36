import calendar
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------- Periods ----------------

class CanonicalMonth(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month:02d}-01"


class MonthColumn(BaseModel):
    column: int
    month: CanonicalMonth


class Period(BaseModel):
    month: int
    year: int

    @property
    def start(self) -> str:
        return f"{self.year}-{self.month:02d}-01"

    @property
    def end(self) -> str:
        last_day = calendar.monthrange(self.year, self.month)[1]
        return f"{self.year}-{self.month:02d}-{last_day:02d}"


# ---------------- Label mapping ----------------

class FieldMapping(BaseModel):
    key: str
    section: str
    sub_section: Optional[str] = None


class Benchmark(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


# ---------------- Statement rows ----------------

class PLRow(BaseModel):
    month: str
    line_item: str
    line_item_label: str
    section: str
    amount: float
    pct_sales: Optional[float] = None
    pct_net_sales: Optional[float] = None


class CFRow(BaseModel):
    month: str
    section: str
    line_item: str
    line_item_label: str
    sub_section: str
    amount: float


class RatioRow(BaseModel):
    month: str
    ratio_name: str
    ratio_label: str
    category: str
    value: float
    benchmark_min: Optional[float] = None
    benchmark_max: Optional[float] = None
    benchmark_label: Optional[str] = None


class FinancialParseResult(BaseModel):
    pl: List[PLRow] = Field(default_factory=list)
    cf: List[CFRow] = Field(default_factory=list)
    ratios: List[RatioRow] = Field(default_factory=list)
    months_found: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


# ---------------- Operational rows ----------------

class DailyProductSummary(BaseModel):
    date: str
    product: str
    net_sales: float
    gross_profit: float
    net_after_mkt: float
    mkt_cost: float


class DailyChannelRecord(BaseModel):
    date: str
    product: str
    channel: str
    net_sales: float
    gross_profit: float
    mp_admin_cost: float = 0
    net_after_mkt: float = 0


class DailyAdsRecord(BaseModel):
    date: str
    ad_account: str
    spent: float
    objective: str
    source: str
    store: str
    advertiser: str


class MonthlyProductSummary(BaseModel):
    product: str
    brand: str
    sales_after_disc: float
    sales_pct: float
    gross_profit: float
    gross_profit_pct: float
    gross_after_mkt: float
    gmp_real: float
    mkt_pct: float
    mkt_share_pct: float


class OperationalParseResult(BaseModel):
    daily_product: List[DailyProductSummary] = Field(default_factory=list)
    daily_channel: List[DailyChannelRecord] = Field(default_factory=list)
    ads: List[DailyAdsRecord] = Field(default_factory=list)
    monthly_summary: List[MonthlyProductSummary] = Field(default_factory=list)
    period: Period


# ---------------- Sync ----------------

class SourceKind(str, Enum):
    FINANCIAL = "financial"
    OPERATIONAL = "operational"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class SheetSource(BaseModel):
    id: Optional[Union[int, str]] = None
    spreadsheet_id: str
    label: str = ""
    kind: SourceKind = SourceKind.OPERATIONAL
    is_active: bool = True
    created_by: Optional[str] = None


class SourceResult(BaseModel):
    source_id: Optional[Union[int, str]] = None
    spreadsheet_id: str
    label: str
    status: SyncStatus
    message: str = ""
    warnings: List[str] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)
    months: List[str] = Field(default_factory=list)
    period: Optional[Period] = None

    @property
    def success(self) -> bool:
        return self.status != SyncStatus.ERROR


class SyncSummary(BaseModel):
    synced: int = 0
    failed: int = 0
    results: List[SourceResult] = Field(default_factory=list)
