import subprocess
import time
from typing import Optional, Callable, List

from ..models.target import RunConfig, Provider
from ..models.exceptions import ProcessException
from ..utils.logger import get_logger

logger = get_logger("harness")


class ProcessHarness:
    """Runs one bypass executable with one strategy for the length of a ``with`` block.

    The process is started fire-and-forget and then given ``warmup_delay``
    seconds before the block body runs. That delay is a best-effort guess at
    when the tool has hooked the network stack; nothing checks that it
    actually has. On exit the process is killed unconditionally, and a failed
    kill is logged rather than raised.

    Raises ``ProviderException`` on entry for an unknown provider id and
    ``ProcessException`` when the executable cannot be started.
    """

    def __init__(
        self,
        config: RunConfig,
        strategy: str,
        provider: Optional[str] = None,
        warmup_delay: Optional[float] = None,
        kill_timeout: float = 5.0,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.strategy = strategy
        self.provider_id = config.provider if provider is None else provider
        self.warmup_delay = config.warmup_delay if warmup_delay is None else warmup_delay
        self.kill_timeout = kill_timeout
        self._popen = popen
        self._sleep = sleep
        self.provider: Optional[Provider] = None
        self.process: Optional[subprocess.Popen] = None

    def command(self) -> List[str]:
        if self.provider is None:
            self.provider = self.config.resolve_provider(self.provider_id)
        return [self.provider.exe, self.strategy]

    def start(self) -> subprocess.Popen:
        cmd = self.command()
        exe = cmd[0]
        try:
            self.process = self._popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
            )
        except (OSError, ValueError) as e:
            raise ProcessException(f"Failed to start {exe}: {e}", executable=exe, strategy=self.strategy)

        logger.debug(f"Started {exe} (pid {getattr(self.process, 'pid', '?')}), warming up {self.warmup_delay:.1f}s")
        if self.warmup_delay > 0:
            self._sleep(self.warmup_delay)
        return self.process

    def stop(self) -> bool:
        proc = self.process
        if proc is None:
            return True
        self.process = None
        exe = self.provider.exe if self.provider else self.provider_id

        try:
            proc.kill()
        except OSError as e:
            logger.error(f"Failed to terminate {exe}: {e}")
            return False

        try:
            proc.wait(timeout=self.kill_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"{exe} did not exit {self.kill_timeout:.0f}s after kill; it may be left running")
            return False
        return True

    def __enter__(self) -> "ProcessHarness":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
