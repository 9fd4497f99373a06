from typing import Optional, Sequence

import requests

from config.constants import GCS_CONFIG, HTTP_CONFIG
from ..models.exceptions import NetworkException
from ..utils.logger import get_logger

logger = get_logger("cluster")

SOURCE_ALPHABET = GCS_CONFIG['source_alphabet']
TARGET_ALPHABET = GCS_CONFIG['target_alphabet']


def fetch_cluster_codename(
    urls: Sequence[str],
    timeout: float = HTTP_CONFIG['codename_timeout'],
    session: Optional[requests.Session] = None,
) -> str:
    """Ask Google's report_mapping endpoints which cache cluster serves us.

    The third whitespace-separated token of the response body is taken as
    the codename. URLs are tried in order and the first body with at least
    three tokens wins.
    """
    s = session or requests.Session()
    try:
        for url in urls:
            try:
                with s.get(url, timeout=timeout) as r:
                    body = r.text
            except requests.exceptions.RequestException as e:
                logger.debug(f"report_mapping request failed for {url}: {e}")
                continue
            tokens = body.split()
            if len(tokens) >= 3:
                return tokens[2]
            logger.debug(f"Unexpected report_mapping body from {url}: {body[:80]!r}")
    finally:
        if session is None:
            s.close()
    raise NetworkException("Could not obtain cluster codename", context={"urls": list(urls)})


def decode_cluster_name(codename: str) -> str:
    # Characters outside the source alphabet are dropped, not passed through.
    out = []
    for ch in codename:
        for i, a in enumerate(SOURCE_ALPHABET):
            if a == ch:
                out.append(TARGET_ALPHABET[i])
                break
    return "".join(out)


def compute_auto_gcs(codename: str) -> str:
    return f"{GCS_CONFIG['url_prefix']}{decode_cluster_name(codename)}{GCS_CONFIG['url_suffix']}"
