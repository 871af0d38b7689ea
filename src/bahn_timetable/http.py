from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import __version__
from .errors import FetchError

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


def create_session(
    user_agent: Optional[str] = None,
    total_retries: int = 3,
    backoff_factor: float = 0.5,
    status_forcelist: Tuple[int, ...] = RETRY_STATUSES,
) -> requests.Session:
    """Session used by the HTTP collaborators.

    Transient failures (connection errors and the statuses in ``status_forcelist``)
    are retried here with exponential backoff; callers above never retry.
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        max_retries=Retry(
            total=total_retries,
            backoff_factor=backoff_factor,
            status_forcelist=status_forcelist,
            allowed_methods={"GET"},
            raise_on_status=False,
            respect_retry_after_header=True,
        )
    )
    for prefix in ("https://", "http://"):
        session.mount(prefix, adapter)
    session.headers["User-Agent"] = user_agent or f"BahnTimetable/{__version__}"
    session.headers["Accept"] = "application/json, text/javascript, */*"
    return session


def get_text(
    session: requests.Session,
    url: str,
    params: Optional[Mapping[str, str]] = None,
    timeout: float = 20,
) -> str:
    """GET ``url`` and return the decoded body; any failure becomes ``FetchError``."""
    logger.debug("GET %s params=%s", url, params)
    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"GET {url} failed: {e}") from e
    return resp.text
