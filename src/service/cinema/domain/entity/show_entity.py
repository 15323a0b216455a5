from datetime import datetime
from typing import Dict, Optional

import attrs


@attrs.define
class ShowEntity:
    id: str
    movie_id: str
    show_date_time: datetime
    show_price: int
    # seat label -> id of the user holding it
    occupied_seats: Dict[str, str] = attrs.field(factory=dict)
    created_at: Optional[datetime] = None

    @property
    def seat_holder_ids(self) -> list[str]:
        """Distinct holders, in first-seen order."""
        return list(dict.fromkeys(self.occupied_seats.values()))
