"""Configuration management for Longtail Scout.

Loads settings from .env file with sensible defaults for all options.
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv


# Load .env from project root
_project_root = Path(__file__).parent.parent
load_dotenv(_project_root / '.env')


def _split_list(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Central configuration for Longtail Scout."""

    # Database
    DB_PATH = os.getenv('DB_PATH', 'data/longtail_scout.db')

    # SearchAd keyword tool credentials (HMAC-signed requests)
    SEARCHAD_API_KEY = os.getenv('SEARCHAD_API_KEY', '')
    SEARCHAD_SECRET_KEY = os.getenv('SEARCHAD_SECRET_KEY', '')
    SEARCHAD_CUSTOMER_ID = os.getenv('SEARCHAD_CUSTOMER_ID', '')
    SEARCHAD_BASE_URL = os.getenv('SEARCHAD_BASE_URL', 'https://api.naver.com')

    # Trends (SerpAPI) and autocomplete
    SERPAPI_KEY = os.getenv('SERPAPI_KEY', '')
    SERPAPI_URL = os.getenv('SERPAPI_URL', 'https://serpapi.com/search.json')
    TRENDS_GEO = os.getenv('TRENDS_GEO', 'KR')
    AUTOCOMPLETE_URL = os.getenv(
        'AUTOCOMPLETE_URL', 'https://ac.search.naver.com/nx/ac'
    )

    # Proxy
    PROXY_URL = os.getenv('PROXY_URL', '')

    # HTTP behaviour
    REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '10'))
    HTTP_RETRIES = int(os.getenv('HTTP_RETRIES', '2'))

    # Rate limits (seconds between requests)
    AUTOCOMPLETE_RATE_LIMIT = float(os.getenv('AUTOCOMPLETE_RATE_LIMIT', '0.2'))
    SEARCHAD_RATE_LIMIT = float(os.getenv('SEARCHAD_RATE_LIMIT', '0.2'))
    SERPAPI_RATE_LIMIT = float(os.getenv('SERPAPI_RATE_LIMIT', '1.0'))

    # Fixed pauses in the collection pipeline (seconds)
    ENRICHMENT_DELAY = float(os.getenv('ENRICHMENT_DELAY', '0.2'))
    COLLECTION_DELAY = float(os.getenv('COLLECTION_DELAY', '1.0'))

    # Failure backoff gate
    MAX_FAILURES = int(os.getenv('MAX_FAILURES', '3'))
    BACKOFF_UNIT = float(os.getenv('BACKOFF_UNIT', '1.0'))

    # Suffixes used for synthetic long-tail candidates
    FALLBACK_PATTERNS = _split_list(
        os.getenv('FALLBACK_PATTERNS', '추천,후기,가격,비교,순위,종류,방법')
    )

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # User agents for rotation
    USER_AGENTS = [
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
        'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    ]

    @classmethod
    def get_db_path(cls):
        """Return absolute path to the database file."""
        db_path = Path(cls.DB_PATH)
        if not db_path.is_absolute():
            db_path = _project_root / db_path
        return str(db_path)

    @classmethod
    def setup_logging(cls):
        """Configure logging based on settings."""
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL.upper(), logging.INFO),
            format='%(asctime)s [%(name)s] %(levelname)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )

    @classmethod
    def as_dict(cls):
        """Return configuration as a dictionary for display."""
        return {
            'DB_PATH': cls.get_db_path(),
            'SEARCHAD_API_KEY': '***' if cls.SEARCHAD_API_KEY else '(not set)',
            'SEARCHAD_SECRET_KEY': '***' if cls.SEARCHAD_SECRET_KEY else '(not set)',
            'SEARCHAD_CUSTOMER_ID': cls.SEARCHAD_CUSTOMER_ID or '(not set)',
            'SERPAPI_KEY': '***' if cls.SERPAPI_KEY else '(not set)',
            'TRENDS_GEO': cls.TRENDS_GEO,
            'PROXY_URL': cls.PROXY_URL or '(not set)',
            'REQUEST_TIMEOUT': f'{cls.REQUEST_TIMEOUT}s',
            'HTTP_RETRIES': cls.HTTP_RETRIES,
            'AUTOCOMPLETE_RATE_LIMIT': f'{cls.AUTOCOMPLETE_RATE_LIMIT}s',
            'SEARCHAD_RATE_LIMIT': f'{cls.SEARCHAD_RATE_LIMIT}s',
            'SERPAPI_RATE_LIMIT': f'{cls.SERPAPI_RATE_LIMIT}s',
            'ENRICHMENT_DELAY': f'{cls.ENRICHMENT_DELAY}s',
            'COLLECTION_DELAY': f'{cls.COLLECTION_DELAY}s',
            'MAX_FAILURES': cls.MAX_FAILURES,
            'BACKOFF_UNIT': f'{cls.BACKOFF_UNIT}s',
            'FALLBACK_PATTERNS': ', '.join(cls.FALLBACK_PATTERNS),
            'LOG_LEVEL': cls.LOG_LEVEL,
            'USER_AGENTS': f'{len(cls.USER_AGENTS)} configured',
        }
