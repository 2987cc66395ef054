"""
Default values for txarchive configuration.
"""

DEFAULT_DATA_DIR = "data"
TRANSACTIONS_DIR = "transactions"
DEFAULT_LOG_FILE = "txarchive.log"

# Bank identifiers used in archive paths.
BANK_CAISSE_EPARGNE = "ce"
KNOWN_BANK_IDS = [BANK_CAISSE_EPARGNE]

# Source-imposed ceiling on how far back a single export can reach
# (about two years and two months for Caisse d'Epargne).
DEFAULT_MAX_DAYS_BACK = 792

DEFAULT_DOWNLOAD_WAIT_SECONDS = 5.0
DEFAULT_REQUEST_DELAY_SECONDS = 1.0
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_FETCH_TIMEOUT = 60.0
DEFAULT_CSV_DELIMITER = ";"

# Caisse d'Epargne Ile-de-France; other regions change the path segment.
CE_LOGIN_URL = "https://www.caisse-epargne.fr/ile-de-france/"
CE_API_BASE = "https://www.rs-ext-bad-ce.caisse-epargne.fr/bapi"
CE_SESSION_FILE = "data/.session/ce.json"
