from pathlib import Path

CONFIG_FILE_NAME = "rollping.yaml"

DEFAULT_COUNT = 3
DEFAULT_TIMEOUT = 2.0
DEFAULT_MAX_CONCURRENCY = 64
DEFAULT_PAYLOAD_SIZE = 8

GEOIP_CACHE_DIR = Path("/tmp/rollping")
GEOIP_DB_FILENAME = "GeoLite2-City.mmdb"
GEOIP_DB_URL = "https://github.com/P3TERX/GeoLite.mmdb/raw/download/GeoLite2-City.mmdb"

PUBLIC_IP_SERVICES = (
    "https://api.ipify.org",
    "https://icanhazip.com",
    "https://ifconfig.me/ip",
)

MICROSECONDS_PER_SECOND = 1_000_000
