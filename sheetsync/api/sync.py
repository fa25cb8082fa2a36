from typing import Optional

from fastapi import APIRouter, Depends, File, Header, HTTPException, Query, UploadFile
from pydantic import BaseModel

from sheetsync.core.config import CRON_SECRET
from sheetsync.core.errors import SourceUnavailable, StructuralMismatch
from sheetsync.core.logger import logger
from sheetsync.models.schema import SourceKind
from sheetsync.services.operational_parser import parse_operational_sheet
from sheetsync.services.product_lookup import ProductLookup, clear_product_mapping_cache
from sheetsync.services.sheets_client import (
    GoogleSheetReader,
    WorkbookReader,
    test_sheet_connection,
)
from sheetsync.services.store import create_store
from sheetsync.services.sync_service import SyncOrchestrator, load_active_sources


router = APIRouter(prefix="/api")


# ---------------- Dependencies ----------------

_store = None


async def get_store():

    # One client per process, reused by every request
    global _store

    if _store is None:
        _store = await create_store()

    return _store


def get_reader():
    return GoogleSheetReader()


def check_cron_secret(authorization: Optional[str] = Header(None)):

    if CRON_SECRET and authorization != f"Bearer {CRON_SECRET}":
        raise HTTPException(status_code=401, detail="Unauthorized")


# ---------------- Sync triggers ----------------

async def _sync_all(kind: SourceKind, store, reader):

    try:

        sources = await load_active_sources(store, kind)

        if not sources:
            return {"message": f"No active {kind.value} sheet connections", "synced": 0, "failed": 0, "results": []}

        summary = await SyncOrchestrator(store, reader).run(sources)

        return {
            "message": f"{kind.value.capitalize()} sync completed",
            **summary.model_dump(mode="json"),
        }

    except Exception as e:

        logger.error(f"{kind.value} sync error: {e}")

        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sync", dependencies=[Depends(check_cron_secret)])
async def sync_operational(store=Depends(get_store), reader=Depends(get_reader)):
    return await _sync_all(SourceKind.OPERATIONAL, store, reader)


@router.post("/financial-sync", dependencies=[Depends(check_cron_secret)])
async def sync_financial(store=Depends(get_store), reader=Depends(get_reader)):
    return await _sync_all(SourceKind.FINANCIAL, store, reader)


@router.get("/financial-sync")
async def sync_financial_cron(secret: Optional[str] = Query(None),
                              store=Depends(get_store), reader=Depends(get_reader)):

    if not CRON_SECRET or secret != CRON_SECRET:
        raise HTTPException(status_code=401, detail="Unauthorized")

    return await _sync_all(SourceKind.FINANCIAL, store, reader)


# ---------------- Excel upload ----------------

@router.post("/upload", dependencies=[Depends(check_cron_secret)])
async def upload(file: UploadFile = File(...), store=Depends(get_store)):

    logger.info(f"Upload started: {file.filename}")

    if not (file.filename or "").lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="file must be an .xlsx workbook")

    try:

        reader = WorkbookReader(await file.read())

        try:
            parsed = await parse_operational_sheet(reader, file.filename, ProductLookup(store))
        finally:
            reader.close()

        counts = await SyncOrchestrator(store, reader).persist_operational(
            parsed,
            import_name=file.filename,
            notes="Excel upload",
        )

    except (StructuralMismatch, SourceUnavailable) as e:

        logger.error(f"Upload rejected for {file.filename}: {e}")

        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:

        logger.error(f"Upload failed for {file.filename}: {e}")

        raise HTTPException(status_code=500, detail=str(e))


    logger.info(f"Upload imported: {counts}")

    return {
        "status": "success",
        "filename": file.filename,
        "period": parsed.period.model_dump(),
        "counts": counts,
    }


# ---------------- Admin helpers ----------------

class ConnectionTest(BaseModel):
    spreadsheet_id: str


@router.post("/connections/test", dependencies=[Depends(check_cron_secret)])
async def connection_test(body: ConnectionTest, reader=Depends(get_reader)):
    return await test_sheet_connection(reader, body.spreadsheet_id)


@router.post("/product-mapping/refresh", dependencies=[Depends(check_cron_secret)])
async def refresh_product_mapping():

    clear_product_mapping_cache()

    return {"status": "cleared"}
