"""Request schemas for the HTTP API."""

from typing import Optional

from pydantic import BaseModel


class DoseLogRequest(BaseModel):
    """Optional body of ``POST /api/dose``; omit timestamp to log a dose now."""

    timestamp: Optional[int] = None
