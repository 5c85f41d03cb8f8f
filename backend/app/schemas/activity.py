from pydantic import BaseModel
from datetime import datetime
from typing import Literal, Optional


class ActivityEntry(BaseModel):
    type: Literal["medicine", "user"]
    action: Literal["created", "updated"]
    timestamp: datetime
    # medicine entries
    name: Optional[str] = None
    user: Optional[str] = None
    # user entries
    username: Optional[str] = None
