"""
Shared HTTP session for talking to the LunarG endpoints.
"""

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)

USER_AGENT = "vksdk-installer"
MAX_REDIRECTS = 3
DEFAULT_TIMEOUT = 30


def create_session() -> requests.Session:
    """
    Create a requests session with the installer's defaults.

    Keep-alive is disabled and redirects are limited to three hops.

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT, "Connection": "close"})
    session.max_redirects = MAX_REDIRECTS
    return session


def get_json(session: requests.Session, url: str, timeout: int = DEFAULT_TIMEOUT) -> Any:
    """
    GET a URL and decode its JSON body.

    Raises:
        requests.RequestException: On network errors or HTTP status >= 400
        ValueError: If the body is not valid JSON
    """
    logger.debug(f"GET {url}")
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    return response.json()
