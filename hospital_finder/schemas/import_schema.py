from __future__ import annotations

from hospital_finder.schemas.common import CamelModel


class ImportSummary(CamelModel):
    imported: int = 0
    failed: int = 0
    total: int = 0


class ImportResponse(ImportSummary):
    message: str = "Import completed"
