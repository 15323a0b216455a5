from datetime import datetime
from typing import List, Optional

import attrs


@attrs.define
class BookingEntity:
    id: str
    user_id: str
    show_id: str
    amount: int
    booked_seats: List[str] = attrs.field(factory=list)
    is_paid: bool = False
    payment_link: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
