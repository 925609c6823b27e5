import logging

from fastapi import FastAPI

from scamguard.config import settings
from scamguard.routers.analyze import router as analyze_router
from scamguard.routers.ui import router as ui_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="ScamGuard API")

app.include_router(ui_router)
app.include_router(analyze_router)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}
