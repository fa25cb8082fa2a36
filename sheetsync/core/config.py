import os
from dotenv import load_dotenv

load_dotenv()

GOOGLE_SERVICE_ACCOUNT_KEY = os.getenv("GOOGLE_SERVICE_ACCOUNT_KEY")

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

CRON_SECRET = os.getenv("CRON_SECRET")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

FINANCIAL_BATCH_SIZE = int(os.getenv("FINANCIAL_BATCH_SIZE", "200"))
OPERATIONAL_BATCH_SIZE = int(os.getenv("OPERATIONAL_BATCH_SIZE", "500"))

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
