from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel

class DispatchState(BaseModel):
    tick_id: int = 0
    scans_run: int = 0
    scans_discarded: int = 0
    last_poll: Optional[datetime] = None

    # Newest snapshot timestamp applied per ambulance
    last_applied: Dict[str, datetime] = {}
