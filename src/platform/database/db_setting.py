from src.platform.database.orm_db_setting import (
    Base,
    Database,
    dispose_engine,
    get_engine,
)

__all__ = [
    'Base',
    'Database',
    'dispose_engine',
    'get_engine',
]
