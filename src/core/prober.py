import concurrent.futures
import threading
from typing import Any, Optional, Dict, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.constants import HTTP_CONFIG
from ..models.result import ProbeResult
from ..utils.logger import get_logger

logger = get_logger("prober")

BLOCKED_STATUS = HTTP_CONFIG["blocked_status"]


def is_reachable_status(status: int) -> bool:
    """200..404 counts as a working path, except 403 which is the usual block page."""
    return 200 <= status < 405 and status != BLOCKED_STATUS


class _Counter:
    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def increment(self):
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class Prober:
    def __init__(
        self,
        timeout: float = 2.0,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        max_workers: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.headers = headers or {}
        self.max_workers = max_workers
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.trust_env = False  # probes go direct, never through env proxies

        if self.user_agent:
            session.headers["User-Agent"] = self.user_agent
        session.headers.update(self.headers)

        # single attempt per probe, no retries
        retry = Retry(total=0, raise_on_status=False)
        adapter = HTTPAdapter(
            max_retries=retry,
            pool_maxsize=HTTP_CONFIG["pool_maxsize"],
            pool_connections=HTTP_CONFIG["pool_connections"],
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _request(self, url: str, outcome: Dict[str, Any]):
        try:
            with self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True) as r:
                outcome["status"] = int(r.status_code)
                outcome["reason"] = r.reason or ""
        except requests.exceptions.RequestException as e:
            outcome["error"] = e
        except Exception as e:
            outcome["crash"] = e

    def probe(self, url: str) -> ProbeResult:
        """GET ``url`` once, giving up after ``timeout`` seconds in total.

        The requests timeout only bounds each socket operation, so the call
        runs on a daemon thread and is abandoned once the deadline passes.
        An abandoned request is a failure whatever it later returns.
        """
        outcome: Dict[str, Any] = {}
        worker = threading.Thread(target=self._request, args=(url, outcome), name=f"probe {url}", daemon=True)
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            logger.info(f"Error requesting {url}: timed out after {self.timeout}s")
            return ProbeResult(url=url, succeeded=False, error=f"timed out after {self.timeout}s")

        if "crash" in outcome:
            raise outcome["crash"]
        if "error" in outcome:
            e = outcome["error"]
            logger.info(f"Error requesting {url}: {e}")
            return ProbeResult(url=url, succeeded=False, error=str(e))

        status = outcome["status"]
        label = f"{status} {outcome['reason']}".strip()
        if is_reachable_status(status):
            logger.info(f"Works: {url} -> {label}")
            return ProbeResult(url=url, succeeded=True, status_code=status)
        logger.info(f"Not working: {url} -> {label}")
        return ProbeResult(url=url, succeeded=False, status_code=status)

    def run_pass(self, urls: Sequence[str]) -> int:
        urls = list(urls)
        if not urls:
            return 0

        successes = _Counter()

        def _task(u: str):
            if self.probe(u).succeeded:
                successes.increment()

        workers = self.max_workers or len(urls)
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_task, u) for u in urls]
            for future in concurrent.futures.as_completed(futures):
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"Probe task failed: {e}")

        return successes.value

    def close(self):
        if self.session:
            try:
                self.session.close()
            except Exception:
                pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
