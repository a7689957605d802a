"""Internal constants shared across the library."""

BASE_URL = "https://www.amiiboapi.com/api/"
USER_AGENT = "pyamiibo/0 (+aiohttp)"

#: Maximum number of items kept from a catalogue refresh (first N in fetch order).
MAX_ITEMS = 20

#: Default HTTP request timeout in seconds.
REQUEST_TIMEOUT = 15.0

ITEMS_ENDPOINT = "amiibo/"

# ------------------------------------------------------------------
# Compatible-game platform tags, in the order games are collected.
# ------------------------------------------------------------------

PLATFORM_3DS = "3DS"
PLATFORM_SWITCH = "Switch"
PLATFORM_WII_U = "Wii U"

#: Detail lookup key kinds.
DETAIL_KEY_ID = "id"
DETAIL_KEY_NAME = "name"
DETAIL_KEYS: frozenset[str] = frozenset({DETAIL_KEY_ID, DETAIL_KEY_NAME})
