import asyncio
import json
from io import BytesIO
from typing import List, Optional

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from openpyxl import load_workbook
from openpyxl.utils.cell import range_boundaries

from sheetsync.core.config import GOOGLE_SERVICE_ACCOUNT_KEY, SHEETS_SCOPES
from sheetsync.core.errors import SourceUnavailable
from sheetsync.core.logger import logger


# dateTimeRenderOption values
FORMATTED_STRING = "FORMATTED_STRING"
SERIAL_NUMBER = "SERIAL_NUMBER"


def split_range(range_spec: str):
    """ "'Dr Hyun'!A3:AI120" -> ("Dr Hyun", "A3:AI120") """

    sheet, _, cells = range_spec.rpartition("!")

    if not sheet:
        return None, cells

    if sheet.startswith("'") and sheet.endswith("'"):
        sheet = sheet[1:-1].replace("''", "'")

    return sheet, cells


# ---------------- Google Sheets ----------------

class GoogleSheetReader:
    """
    Reads raw cell values with a service account. gspread is blocking, so
    every call is handed to a thread and awaited before the next one starts.
    """

    def __init__(self, client: Optional[gspread.Client] = None):
        self._client = client


    def _get_client(self) -> gspread.Client:

        if self._client is not None:
            return self._client

        if not GOOGLE_SERVICE_ACCOUNT_KEY:
            raise SourceUnavailable("GOOGLE_SERVICE_ACCOUNT_KEY not set")

        try:
            info = json.loads(GOOGLE_SERVICE_ACCOUNT_KEY)
            creds = Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
        except (ValueError, GoogleAuthError) as e:
            raise SourceUnavailable(f"Invalid service account key: {e}") from e

        self._client = gspread.authorize(creds)

        return self._client


    def _open(self, source_id):

        try:
            return self._get_client().open_by_key(source_id)

        except gspread.exceptions.SpreadsheetNotFound as e:
            raise SourceUnavailable(
                f"Spreadsheet {source_id} not found. "
                f"Make sure it is shared with the service account email."
            ) from e

        except (gspread.exceptions.GSpreadException, GoogleAuthError) as e:
            raise SourceUnavailable(str(e)) from e


    def _values(self, source_id, range_spec, date_render) -> List[list]:

        spreadsheet = self._open(source_id)

        try:
            res = spreadsheet.values_get(range_spec, params={
                "valueRenderOption": "UNFORMATTED_VALUE",
                "dateTimeRenderOption": date_render,
            })

        except (gspread.exceptions.GSpreadException, GoogleAuthError) as e:
            raise SourceUnavailable(str(e)) from e

        return res.get("values", [])


    def _titles(self, source_id) -> List[str]:

        spreadsheet = self._open(source_id)

        try:
            return [ws.title for ws in spreadsheet.worksheets()]

        except (gspread.exceptions.GSpreadException, GoogleAuthError) as e:
            raise SourceUnavailable(str(e)) from e


    async def get_range(self, source_id, range_spec, date_render=FORMATTED_STRING) -> List[list]:

        logger.info(f"Fetching {range_spec} from {source_id}")

        return await asyncio.to_thread(self._values, source_id, range_spec, date_render)


    async def sheet_names(self, source_id) -> List[str]:
        return await asyncio.to_thread(self._titles, source_id)


# ---------------- Excel export ----------------

class WorkbookReader:
    """
    Same interface as GoogleSheetReader over an uploaded .xlsx export.
    `source_id` is ignored; dates come back as datetime objects.
    """

    def __init__(self, content: bytes):

        try:
            self.wb = load_workbook(BytesIO(content), data_only=True, read_only=True)
        except Exception as e:
            raise SourceUnavailable(f"Could not open workbook: {e}") from e


    def close(self):
        # read-only workbooks keep the archive open until closed
        self.wb.close()


    async def sheet_names(self, source_id=None) -> List[str]:
        return list(self.wb.sheetnames)


    async def get_range(self, source_id, range_spec, date_render=FORMATTED_STRING) -> List[list]:

        sheet, cells = split_range(range_spec)

        if sheet not in self.wb.sheetnames:
            raise SourceUnavailable(f"Unable to parse range: {range_spec}")

        ws = self.wb[sheet]

        min_col, min_row, max_col, max_row = range_boundaries(cells)

        rows = []

        for row in ws.iter_rows(min_row=min_row, max_row=max_row,
                                min_col=min_col, max_col=max_col,
                                values_only=True):

            values = list(row)

            # Match the Sheets API: trailing blanks are not returned
            while values and values[-1] is None:
                values.pop()

            rows.append(values)

        while rows and not rows[-1]:
            rows.pop()

        return rows


async def test_sheet_connection(reader, source_id) -> dict:

    try:
        names = await reader.sheet_names(source_id)
        return {"success": True, "sheet_names": names}

    except SourceUnavailable as e:
        logger.warning(f"Connection test failed for {source_id}: {e}")
        return {"success": False, "error": str(e)}
