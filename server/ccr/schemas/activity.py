from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ActivityItem(BaseModel):
    id: int
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    description: Optional[str] = None
    actor: Optional[str] = None
    created_at: datetime
    time_ago: str
