from datetime import datetime
from typing import Any, Dict

import attrs


@attrs.define(frozen=True)
class ReminderTask:
    """One reminder e-mail for one (user, show) pair."""

    user_email: str
    user_name: str
    movie_title: str
    show_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_email': self.user_email,
            'user_name': self.user_name,
            'movie_title': self.movie_title,
            'show_time': self.show_time.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReminderTask':
        return cls(
            user_email=data['user_email'],
            user_name=data['user_name'],
            movie_title=data['movie_title'],
            show_time=datetime.fromisoformat(data['show_time']),
        )
