"""Shared HTTP client with retry logic, user-agent rotation, and proxy support.

Provides a configured requests.Session with limited retries on 429 and
5xx responses, and a fetch() helper that turns every transport problem
into an UpstreamError so collectors have a single failure type to handle.
"""

import random
import logging
from urllib3.util.retry import Retry
from requests.adapters import HTTPAdapter
import requests

from longtail_scout.config import Config
from longtail_scout.errors import UpstreamError

logger = logging.getLogger(__name__)


def create_session(proxy_url=None, retries=None):
    """Create a configured requests.Session with retry logic.

    Args:
        proxy_url: Optional proxy URL to route requests through.
        retries: Number of retries on 429/5xx. Defaults to Config.HTTP_RETRIES.

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=Config.HTTP_RETRIES if retries is None else retries,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=['GET'],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount('https://', adapter)
    session.mount('http://', adapter)

    if proxy_url or Config.PROXY_URL:
        url = proxy_url or Config.PROXY_URL
        session.proxies = {
            'http': url,
            'https': url,
        }
        logger.info(f'HTTP client using proxy: {url[:30]}...')

    return session


def get_random_user_agent():
    """Return a random user agent string from the configured list."""
    return random.choice(Config.USER_AGENTS)


def get_headers():
    """Return request headers with a rotated user agent."""
    return {
        'User-Agent': get_random_user_agent(),
        'Accept': 'application/json, text/javascript, */*',
        'Accept-Language': 'ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7',
    }


# Shared session instance (lazy initialization)
_session = None


def get_session():
    """Get the shared HTTP session, creating it if needed."""
    global _session
    if _session is None:
        _session = create_session()
    return _session


def fetch(url, params=None, headers=None, timeout=None, session=None):
    """Make a GET request and return the decoded JSON body.

    Args:
        url: URL to fetch.
        params: Optional query parameters.
        headers: Optional headers (merged with defaults).
        timeout: Seconds before the request is abandoned.
            Defaults to Config.REQUEST_TIMEOUT.
        session: Optional requests.Session; the shared session otherwise.

    Returns:
        Parsed JSON payload.

    Raises:
        UpstreamError: On network error, timeout, non-2xx status or a
            body that is not valid JSON.
    """
    session = session or get_session()
    request_headers = get_headers()
    if headers:
        request_headers.update(headers)

    timeout = Config.REQUEST_TIMEOUT if timeout is None else timeout

    logger.debug(f'GET {url} params={params}')

    try:
        response = session.get(
            url, params=params, headers=request_headers, timeout=timeout
        )
    except requests.Timeout as e:
        raise UpstreamError(None, f'Timed out after {timeout}s: {url}') from e
    except requests.RequestException as e:
        raise UpstreamError(None, f'Request to {url} failed: {e}') from e

    logger.debug(f'Response: {response.status_code} ({len(response.content)} bytes)')

    if response.status_code == 429:
        logger.warning(f'Rate limited (429) on {url}')

    if not 200 <= response.status_code < 300:
        raise UpstreamError(
            response.status_code,
            f'HTTP {response.status_code} from {url}: {response.text[:200]}',
        )

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            response.status_code, f'Invalid JSON from {url}: {e}'
        ) from e
