from typing import Dict, Iterable


def release_seats(
    occupied_seats: Dict[str, str], seats: Iterable[str], holder_id: str
) -> Dict[str, str]:
    """
    Return a new occupied-seat mapping without those of `seats` held by `holder_id`.

    Seats that are free or were taken by someone else since are left alone, so
    releasing the same booking twice yields the same mapping even if the seat
    was re-booked in between.
    """
    to_release = set(seats)
    return {
        seat: holder
        for seat, holder in occupied_seats.items()
        if seat not in to_release or holder != holder_id
    }
