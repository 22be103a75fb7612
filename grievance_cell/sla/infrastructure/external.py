"""
SLA External Integrations
==========================

- YAML policy file loading with watchdog hot-reload
- APScheduler job driving the escalation sweep
"""

import threading
from pathlib import Path
from typing import Awaitable, Callable, Optional

import yaml
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from grievance_cell.core import ConfigurationException
from grievance_cell.shared.infrastructure.logging import get_logger
from grievance_cell.sla.application.services import ISLAConfigProvider
from grievance_cell.sla.domain import SLAConfig

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA config file changes."""

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def _is_config(self, path) -> bool:
        return Path(path).resolve() == self.config_path.resolve()

    def on_modified(self, event):
        if not event.is_directory and self._is_config(event.src_path):
            logger.info("SLA config file changed", extra={"path": str(event.src_path)})
            self.config_manager.reload()

    def on_created(self, event):
        # editors that save by rename produce a create instead of a modify
        self.on_modified(event)


class SLAConfigManager(ISLAConfigProvider):
    """
    Thread-safe SLA configuration holder with hot-reload.

    The watchdog observer runs on its own thread; readers always see either
    the old or the new config, never a partial one. A reload that fails to
    parse keeps the previous config.
    """

    def __init__(self, config: Optional[SLAConfig] = None):
        self._config: Optional[SLAConfig] = config
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> SLAConfig:
        """
        Initial configuration load.

        Raises:
            ConfigurationException: the file exists but is not a valid policy
        """
        self._path = Path(path)
        try:
            config = self._load_from_file(self._path)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationException(f"Invalid SLA config {self._path}: {e}")

        with self._lock:
            self._config = config
        logger.info(
            "SLA configuration loaded",
            extra={"path": str(self._path), "budget_source": config.budget_source}
        )
        return config

    def _load_from_file(self, path: Path) -> SLAConfig:
        if not path.exists():
            logger.warning("SLA config file not found, using defaults", extra={"path": str(path)})
            return SLAConfig()

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        return SLAConfig(**data)

    def reload(self) -> bool:
        """Reload configuration from file."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except (yaml.YAMLError, ValidationError, TypeError, OSError) as e:
            logger.error("Failed to reload SLA config, keeping previous", extra={"error": str(e)})
            return False

        with self._lock:
            self._config = new_config
        logger.info("SLA configuration reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching the configuration file.

        Skipped when the file does not exist or the platform has no file
        notifications (some container runtimes).
        """
        if self._path is None:
            raise RuntimeError("Config not loaded. Call load() first.")

        if not self._path.exists():
            logger.info("SLA config file absent, not watching", extra={"path": str(self._path)})
            return

        try:
            self._observer = Observer()
            self._observer.schedule(
                ConfigFileHandler(self, self._path),
                str(self._path.parent.resolve()),
                recursive=False
            )
            self._observer.start()
            logger.info("Started watching SLA config", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning("File watching not available, using static config", extra={"error": str(e)})
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def config(self) -> SLAConfig:
        with self._lock:
            if self._config is None:
                raise RuntimeError("SLA configuration not loaded")
            return self._config

    def get_config(self) -> SLAConfig:
        return self.config


class EscalationScheduler:
    """
    APScheduler wrapper running the escalation sweep on an interval.

    `max_instances=1` keeps ticks from overlapping; the sweep has its own
    guard for on-demand runs.
    """

    JOB_ID = "escalation_sweep"

    def __init__(self, interval_minutes: int = 30):
        self.interval_minutes = interval_minutes
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self, job_func: Callable[[], Awaitable]) -> None:
        """Start the scheduler with the given coroutine function."""
        if self._running:
            logger.warning("Escalation scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            job_func,
            "interval",
            minutes=self.interval_minutes,
            id=self.JOB_ID,
            name="Escalation Sweep",
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self._scheduler.start()
        self._running = True

        logger.info("Escalation scheduler started", extra={"interval_minutes": self.interval_minutes})

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("Escalation scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running
