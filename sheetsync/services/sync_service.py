# sheetsync/services/sync_service.py
#
# Drives configured spreadsheet sources through parse -> delete period ->
# batched insert, one source at a time, and records a status per source.

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sheetsync.core.config import FINANCIAL_BATCH_SIZE, OPERATIONAL_BATCH_SIZE
from sheetsync.core.logger import logger
from sheetsync.models.schema import (
    FinancialParseResult,
    OperationalParseResult,
    Period,
    SheetSource,
    SourceKind,
    SourceResult,
    SyncStatus,
    SyncSummary,
)
from sheetsync.services.financial_parser import parse_financial_report
from sheetsync.services.operational_parser import parse_operational_sheet
from sheetsync.services.product_lookup import ProductLookup


CONNECTION_TABLES = {
    SourceKind.FINANCIAL: "financial_sheet_connections",
    SourceKind.OPERATIONAL: "sheet_connections",
}

PL_TABLE = "financial_pl_monthly"
CF_TABLE = "financial_cf_monthly"
RATIO_TABLE = "financial_ratios_monthly"

DAILY_PRODUCT_TABLE = "daily_product_summary"
DAILY_CHANNEL_TABLE = "daily_channel_data"
DAILY_ADS_TABLE = "daily_ads_spend"
MONTHLY_SUMMARY_TABLE = "monthly_product_summary"
IMPORTS_TABLE = "data_imports"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _date_span(rows, period: Period):
    """Period bounds widened to every row date, as ISO strings."""

    dates = [r.date for r in rows]

    return min([period.start, *dates]), max([period.end, *dates])


async def load_active_sources(store, kind: SourceKind) -> List[SheetSource]:

    rows = await store.select(CONNECTION_TABLES[kind], eq={"is_active": True})

    return [
        SheetSource(
            id=row.get("id"),
            spreadsheet_id=row["spreadsheet_id"],
            label=row.get("label") or "",
            kind=kind,
            is_active=True,
            created_by=row.get("created_by"),
        )
        for row in rows
    ]


class SyncOrchestrator:

    def __init__(self, store, reader, lookup: Optional[ProductLookup] = None,
                 financial_batch_size: int = FINANCIAL_BATCH_SIZE,
                 operational_batch_size: int = OPERATIONAL_BATCH_SIZE):

        self.store = store
        self.reader = reader
        self.lookup = lookup or ProductLookup(store)
        self.financial_batch_size = financial_batch_size
        self.operational_batch_size = operational_batch_size


    # ---------------- Batch ----------------

    async def run(self, sources: Iterable[SheetSource]) -> SyncSummary:
        """
        Sync sources one after another. One source failing never stops the
        rest; there is no per-source timeout.
        """

        summary = SyncSummary()

        for source in sources:

            result = await self.sync_source(source)

            summary.results.append(result)

            if result.success:
                summary.synced += 1
            else:
                summary.failed += 1

        logger.info(f"Sync finished: {summary.synced} synced, {summary.failed} failed")

        return summary


    async def sync_source(self, source: SheetSource) -> SourceResult:

        logger.info(f"Syncing {source.label} ({source.spreadsheet_id}) as {source.kind.value}")

        try:

            if source.kind == SourceKind.FINANCIAL:
                result = await self._sync_financial(source)
            else:
                result = await self._sync_operational(source)

        except Exception as e:

            # Tables already replaced for this source stay replaced
            logger.error(f"Sync failed for {source.label} ({source.spreadsheet_id}): {e}")

            result = SourceResult(
                source_id=source.id,
                spreadsheet_id=source.spreadsheet_id,
                label=source.label,
                status=SyncStatus.ERROR,
                message=str(e) or "Unknown error",
            )

        await self._write_status(source, result)

        return result


    async def _write_status(self, source: SheetSource, result: SourceResult):

        if source.id is None:
            return

        try:
            await self.store.update(
                CONNECTION_TABLES[source.kind],
                {
                    "last_synced": _now(),
                    "last_sync_status": "error" if result.status == SyncStatus.ERROR else "success",
                    "last_sync_message": result.message,
                },
                eq={"id": source.id},
            )

        except Exception as e:
            logger.error(f"Could not record sync status for {source.label}: {e}")
            result.warnings.append(f"Status not recorded: {e}")


    # ---------------- Financial ----------------

    async def _sync_financial(self, source: SheetSource) -> SourceResult:

        # Unreadable source aborts here; per-statement problems do not
        await self.reader.sheet_names(source.spreadsheet_id)

        parsed = await parse_financial_report(self.reader, source.spreadsheet_id)

        counts = await self.persist_financial(parsed)

        message = (
            f"PL: {counts['pl']} rows, CF: {counts['cf']} rows, "
            f"Ratios: {counts['ratios']} rows. Months: {len(parsed.months_found)}"
        )

        if parsed.errors:
            logger.warning(f"Warnings for {source.label}: {parsed.errors}")
            message += f". Warnings: {'; '.join(parsed.errors)}"

        return SourceResult(
            source_id=source.id,
            spreadsheet_id=source.spreadsheet_id,
            label=source.label,
            status=SyncStatus.WARNING if parsed.errors else SyncStatus.SUCCESS,
            message=message,
            warnings=list(parsed.errors),
            counts=counts,
            months=parsed.months_found,
        )


    async def _replace_months(self, table, rows) -> int:

        if not rows:
            return 0

        months = list(dict.fromkeys(r.month for r in rows))

        # Every delete settles before the first insert
        for month in months:
            await self.store.delete_where(table, eq={"month": month})

        return await self.store.insert_batch(
            table,
            [r.model_dump() for r in rows],
            self.financial_batch_size,
        )


    async def persist_financial(self, parsed: FinancialParseResult) -> dict:

        return {
            "pl": await self._replace_months(PL_TABLE, parsed.pl),
            "cf": await self._replace_months(CF_TABLE, parsed.cf),
            "ratios": await self._replace_months(RATIO_TABLE, parsed.ratios),
        }


    # ---------------- Operational ----------------

    async def _sync_operational(self, source: SheetSource) -> SourceResult:

        parsed = await parse_operational_sheet(self.reader, source.spreadsheet_id, self.lookup)

        counts = await self.persist_operational(
            parsed,
            import_name=f"gsheet:{source.spreadsheet_id}",
            imported_by=source.created_by,
            notes=f"Auto-sync from Google Sheet: {source.label}",
        )

        return SourceResult(
            source_id=source.id,
            spreadsheet_id=source.spreadsheet_id,
            label=source.label,
            status=SyncStatus.SUCCESS,
            message=f"Synced {counts['daily_product']} product rows, {counts['ads']} ad rows",
            counts=counts,
            period=parsed.period,
        )


    async def persist_operational(self, parsed: OperationalParseResult, import_name: str,
                                  imported_by: Optional[str] = None,
                                  notes: Optional[str] = None) -> dict:

        period = parsed.period

        daily_tables = (
            (DAILY_PRODUCT_TABLE, parsed.daily_product),
            (DAILY_CHANNEL_TABLE, parsed.daily_channel),
            (DAILY_ADS_TABLE, parsed.ads),
        )

        # Ads logs and brand tabs can run past the period month
        for table, rows in daily_tables:
            start, end = _date_span(rows, period)
            await self.store.delete_where(table, gte={"date": start}, lte={"date": end})

        await self.store.delete_where(
            MONTHLY_SUMMARY_TABLE,
            eq={"period_month": period.month, "period_year": period.year},
        )


        row_count = len(parsed.daily_product) + len(parsed.daily_channel) + len(parsed.ads)

        import_key = {
            "filename": import_name,
            "period_month": period.month,
            "period_year": period.year,
        }

        await self.store.upsert(
            IMPORTS_TABLE,
            {
                **import_key,
                "imported_by": imported_by,
                "row_count": row_count,
                "status": "processing",
                "notes": notes,
            },
            on_conflict="period_month,period_year,filename",
        )


        batch = self.operational_batch_size

        counts = {
            "daily_product": await self.store.insert_batch(
                DAILY_PRODUCT_TABLE, [r.model_dump() for r in parsed.daily_product], batch),
            "daily_channel": await self.store.insert_batch(
                DAILY_CHANNEL_TABLE, [r.model_dump() for r in parsed.daily_channel], batch),
            "ads": await self.store.insert_batch(
                DAILY_ADS_TABLE, [r.model_dump() for r in parsed.ads], batch),
            "monthly_summary": await self.store.insert_batch(
                MONTHLY_SUMMARY_TABLE,
                [
                    {**r.model_dump(), "period_month": period.month, "period_year": period.year}
                    for r in parsed.monthly_summary
                ],
                batch,
            ),
        }


        await self.store.update(
            IMPORTS_TABLE,
            {"status": "completed", "row_count": row_count},
            eq=import_key,
        )

        return counts


async def run_sync(sources, store, reader, lookup: Optional[ProductLookup] = None) -> SyncSummary:
    return await SyncOrchestrator(store, reader, lookup).run(sources)
