"""
purger.throttle — Rate-limiting constants and configuration.
"""

BASE_URL = "https://discord.com/api/v9"
REQUEST_TIMEOUT = 30

# Search: steady cadence between pages, floor and fallback for 429 waits
SEARCH_DELAY_MS = 1100
SEARCH_RATE_LIMIT_FLOOR_MS = SEARCH_DELAY_MS + 100
SEARCH_DEFAULT_WAIT_MS = 5000

# Delete: cadence between records doubles as the 429 floor
DELETE_DELAY_MS = 1500
DELETE_DEFAULT_WAIT_MS = DELETE_DELAY_MS * 2
RETRY_DELAY_BASE_MS = 5000
MAX_DELETE_ATTEMPTS = 3

RECORDS_FILE = "found_messages.json"

BOT_TOKEN_PREFIX = "Bot "
USER_TOKEN_DELAY = 3
CONFIRM_DELAY = 5
