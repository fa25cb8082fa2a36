from datetime import datetime

from fastapi import FastAPI

from sheetsync.api.sync import router


app = FastAPI(title="Sheet Sync")

app.include_router(router)


@app.get("/health")
def health():

    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
    }
