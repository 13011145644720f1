"""
Profile lookup schemas.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class BulkProfilesRequest(BaseModel):
    # Validated by the service so a non-list answers "ids must be an array".
    ids: Any = None
