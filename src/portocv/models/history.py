"""History entry shown on the home screen."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field

from portocv.models.base import WireModel


class HistoryItem(WireModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9])
    name: str
    title: str
    photo_url: str | None = None
    deployed_at: datetime = Field(default_factory=datetime.now)
    type: Literal["portfolio", "resume"] = "portfolio"
    url: str | None = None
