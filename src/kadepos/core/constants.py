"""KadePOS constants.

All magic numbers and names shared across modules live here.
"""

# Durable record holding the offline queue
STORAGE_RECORD_NAME = "kade-offline-storage"
STORAGE_RECORD_KEY = "offline_queue"

# Remote order status assigned on creation (live and replayed orders alike)
ORDER_STATUS_PENDING = "pending"

# Hosted backend tables
ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
MENU_ITEMS_TABLE = "menu_items"

# Timeouts and retry pacing
DEFAULT_REQUEST_TIMEOUT_MS = 10000
DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0
DEFAULT_MIN_RETRY_SECONDS = 30.0
DEFAULT_WATCH_INTERVAL_SECONDS = 5.0

# Persistence writes attempted per mutation (first try + one retry)
PERSISTENCE_WRITE_ATTEMPTS = 2

# Menu categories in display order
MENU_CATEGORIES = ("Base", "Protein", "Drink", "Extra")

# User-visible notices
NOTICE_BACK_ONLINE = "Back online! Syncing data..."
NOTICE_WENT_OFFLINE = "You are offline. Orders will be saved locally."
NOTICE_SAVED_OFFLINE = "Order saved offline! Will sync when online."
NOTICE_NOT_PERSISTED = "Order queued but could not be saved to disk. Do not close the register."
NOTICE_ORDER_PLACED = "Order placed successfully!"
NOTICE_SYNCED = "Synced {count} offline orders!"
INDICATOR_OFFLINE = "Offline Mode"
INDICATOR_SYNCING = "Syncing {count} orders..."
