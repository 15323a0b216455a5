USER_BASE = '/api/user'
USER_BOOKINGS = f'{USER_BASE}/bookings'
USER_UPDATE_FAVORITE = f'{USER_BASE}/update-favorite'
USER_FAVORITES = f'{USER_BASE}/favorites'

HEALTH = '/health'
METRICS = '/metrics'
