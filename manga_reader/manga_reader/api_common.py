"""
Shared HTTP plumbing for the catalog and download-service clients.
"""
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import constants as c
from .logging import APIError, DecodeError, get_logger, log_api_call

logger = get_logger(__name__)

# Exceptions raised while picking apart an unexpected response shape
DECODE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


def create_session(
    max_retries: int = 0,
    backoff_factor: float = c.API_RETRY_BACKOFF_FACTOR,
    status_forcelist: tuple = (500, 502, 503, 504),
) -> requests.Session:
    """
    Creates a requests session. With max_retries > 0 the session retries
    5xx responses and connection errors; by default every call is one-shot.
    """
    session = requests.Session()
    if max_retries > 0:
        retry = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=status_forcelist,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
    return session


def error_message(response: requests.Response) -> str:
    """Pulls 'detail' or 'error' out of a JSON error body, else the raw text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("detail") or body.get("error")
        if message:
            return str(message)
    return response.text.strip() or f"HTTP {response.status_code}"


def send(
    session: requests.Session,
    method: str,
    url: str,
    service: str,
    timeout: int = c.API_TIMEOUT_SECONDS,
    params: Optional[Any] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Performs one request and returns the decoded JSON object.

    Raises:
        APIError: On connection failure or a non-2xx status.
        DecodeError: If the body is not a JSON object.
    """
    # Repeated keys (includes[]) collapse here; this is only for the log line
    log_api_call(url, method, dict(params) if params else None)
    try:
        response = session.request(method, url, params=params, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        logger.error(f"{service} request failed: {method} {url}: {e}")
        raise APIError(f"{service} is unreachable: {e}") from e

    if not 200 <= response.status_code < 300:
        message = error_message(response)
        logger.error(f"{service} returned {response.status_code} for {method} {url}: {message}")
        raise APIError(f"{service} error ({response.status_code}): {message}", status_code=response.status_code)

    try:
        data = response.json()
    except ValueError as e:
        raise DecodeError(f"{service} returned a non-JSON response") from e

    if not isinstance(data, dict):
        raise DecodeError(f"{service} returned an unexpected response shape")
    return data
