from datetime import date
from typing import Any, Dict, List, Optional

import attrs


@attrs.define
class MovieEntity:
    id: str
    title: str
    overview: str = ''
    poster_path: str = ''
    backdrop_path: str = ''
    release_date: Optional[date] = None
    original_language: Optional[str] = None
    tagline: Optional[str] = None
    genres: List[Dict[str, Any]] = attrs.field(factory=list)
    casts: List[Dict[str, Any]] = attrs.field(factory=list)
    vote_average: float = 0.0
    runtime: int = 0
