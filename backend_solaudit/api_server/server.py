"""
FastAPI server for on-demand audits.

Mounts the audit router and a health check. Stateless: every request
collects fresh evidence through its own collector.
"""

from __future__ import annotations

from fastapi import FastAPI

from backend_solaudit import __version__
from backend_solaudit.api_server.audit_routes import router as audit_router
from backend_solaudit.audit_logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Solana Audit API",
    version=__version__,
    description="Heuristic trust scores for Solana programs and transactions.",
)
app.include_router(audit_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
