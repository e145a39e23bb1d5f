from __future__ import annotations

import logging
from typing import List

import requests

from ..errors import PreconditionFailure

logger = logging.getLogger(__name__)

DEFAULT_KEYS_URL = "https://github.com/{user}.keys"
FETCH_TIMEOUT = 30


def parse_keys(text: str) -> List[str]:
    """Split a newline-separated key list, dropping blank lines, keeping order."""

    return [line.strip() for line in text.splitlines() if line.strip()]


def fetch_authorized_keys(
    user: str,
    *,
    url_template: str = DEFAULT_KEYS_URL,
    timeout: float = FETCH_TIMEOUT,
) -> List[str]:
    """Fetch public keys published for ``user``.

    Raises PreconditionFailure on transport errors, non-2xx responses, or an
    empty key list.
    """

    url = url_template.format(user=user)
    logger.info("Fetching SSH keys for user %s (%s)", user, url)

    try:
        r = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise PreconditionFailure(f"Failed to fetch SSH keys from {url}: {e}") from e

    if not r.ok:
        raise PreconditionFailure(f"Failed to fetch SSH keys from {url}: {r.status_code} {r.reason}")

    keys = parse_keys(r.text)
    if not keys:
        raise PreconditionFailure(f"No SSH keys found for user: {user}")

    logger.info("Found %d SSH key(s)", len(keys))
    return keys
