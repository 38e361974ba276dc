import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # Comma-separated list
    CORS_ORIGINS = _env_list("CORS_ORIGINS", "")

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))

    SITE_CODE = os.getenv("SITE_CODE", "default")
    CURRENCY_ID = os.getenv("CURRENCY_ID", "EUR")
    # True if catalog prices include tax
    TAX_FLAG = _env_bool("TAX_FLAG", "true")

    # Flask-Caching backend; RedisCache when a host is configured
    CACHE_REDIS_HOST = os.getenv("CACHE_REDIS_HOST")
    CACHE_REDIS_PORT = int(os.getenv("CACHE_REDIS_PORT", "6379"))
    CACHE_REDIS_DB = int(os.getenv("CACHE_REDIS_DB", "0"))
    CACHE_TYPE = "RedisCache" if CACHE_REDIS_HOST else os.getenv("CACHE_TYPE", "SimpleCache")
    CACHE_KEY_PREFIX = os.getenv("CACHE_KEY_PREFIX", "storefront:")

    HTML_CACHE_ENABLE = _env_bool("HTML_CACHE_ENABLE", "true")
    HTML_CACHE_DEFAULT_TIMEOUT = int(os.getenv("HTML_CACHE_DEFAULT_TIMEOUT", "86400"))

    CATALOG_DOMAINS = ["media", "price", "text", "attribute", "product"]
    CATALOG_LISTS_SIZE = int(os.getenv("CATALOG_LISTS_SIZE", "24"))
    CATALOG_SESSION_SEEN_MAXITEMS = int(os.getenv("CATALOG_SESSION_SEEN_MAXITEMS", "6"))

    # None: fall back to CATALOG_DOMAINS
    CATALOG_DETAIL_DOMAINS = None
    CATALOG_DETAIL_PRODID_DEFAULT = os.getenv("CATALOG_DETAIL_PRODID_DEFAULT", "")
    CATALOG_DETAIL_SUBPARTS = ["service", "seen"]
    CATALOG_DETAIL_STOCK_ENABLE = _env_bool("CATALOG_DETAIL_STOCK_ENABLE", "true")
    CATALOG_DETAIL_URL_ENDPOINT = "catalog.detail"

    CATALOG_STAGE_SUBPARTS = ["navigator"]
    CATALOG_STAGE_NAVIGATOR_SUBPARTS: list[str] = []

    # Used to build absolute links when rendering outside a request
    SHOP_BASE_URL = os.getenv("SHOP_BASE_URL", "http://localhost:8080")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "shop@example.com")
    EMAIL_SUMMARY_ATTRIBUTE_TYPES = ["variant", "config", "custom"]
    # Lowest payment status (6: received) for which e-mails offer downloads
    EMAIL_DOWNLOAD_PAYMENT_STATUS = int(os.getenv("EMAIL_DOWNLOAD_PAYMENT_STATUS", "6"))
    # Endpoint for download links in e-mails; no links when unset
    ACCOUNT_DOWNLOAD_URL_ENDPOINT = os.getenv("ACCOUNT_DOWNLOAD_URL_ENDPOINT") or None

    # domain -> {msgid: text}; untranslated ids are returned unchanged
    TRANSLATIONS: dict[str, dict[str, str]] = {}


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    CACHE_TYPE = "SimpleCache"
    HTML_CACHE_ENABLE = True
