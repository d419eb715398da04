"""
Ticket Policy Configuration
===========================

YAML-backed ``EnginePolicy`` with hot reload through watchdog.
"""

import threading
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ticketdesk.core import ConfigurationException
from ticketdesk.shared.infrastructure.logging import get_logger
from ticketdesk.tickets.application import IPolicyProvider
from ticketdesk.tickets.domain import EnginePolicy

logger = get_logger(__name__)


class PolicyFileHandler(FileSystemEventHandler):
    """Watchdog event handler for policy file changes."""

    def __init__(self, manager: "PolicyConfigManager", policy_path: Path):
        self.manager = manager
        self.policy_path = policy_path
        super().__init__()

    def on_modified(self, event):
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.policy_path.resolve():
            logger.info("Policy file changed", extra={"path": str(event.src_path)})
            self.manager.reload()


class PolicyConfigManager(IPolicyProvider):
    """
    Thread-safe engine policy holder with hot-reload support.

    A missing file means defaults. A broken file fails ``load`` loudly;
    on ``reload`` the previous policy stays in force.
    """

    def __init__(self):
        self._policy: Optional[EnginePolicy] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> EnginePolicy:
        """
        Initial policy load.

        Raises:
            ConfigurationException: file exists but is not a valid policy
        """
        self._path = Path(path)
        policy = self._load_from_file(self._path)
        with self._lock:
            self._policy = policy
        logger.info(
            "Ticket policy loaded",
            extra={"path": str(self._path), "default_sla_hours": policy.default_sla_hours}
        )
        return policy

    def _load_from_file(self, path: Path) -> EnginePolicy:
        if not path.exists():
            logger.warning("Policy file not found, using defaults", extra={"path": str(path)})
            return EnginePolicy()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            return EnginePolicy(**data)
        except (yaml.YAMLError, ValidationError, TypeError) as exc:
            raise ConfigurationException(
                f"Invalid ticket policy file {path}: {exc}",
                details={"path": str(path)}
            )

    def reload(self) -> bool:
        """Reload from the file; keep the current policy on failure."""
        if self._path is None:
            return False

        try:
            new_policy = self._load_from_file(self._path)
        except ConfigurationException as exc:
            logger.error("Failed to reload ticket policy", extra={"error": exc.message})
            return False

        with self._lock:
            self._policy = new_policy
        logger.info("Ticket policy reloaded", extra={"path": str(self._path)})
        return True

    def start_watching(self) -> None:
        """
        Start watching the policy file.

        Skipped when the file does not exist or the platform has no
        file-watching support.
        """
        if self._path is None:
            raise RuntimeError("Policy not loaded. Call load() first.")

        if not self._path.exists():
            logger.info("Policy file absent, not watching", extra={"path": str(self._path)})
            return

        try:
            self._observer = Observer()
            self._observer.schedule(
                PolicyFileHandler(self, self._path),
                str(self._path.parent),
                recursive=False
            )
            self._observer.start()
            logger.info("Watching policy file", extra={"path": str(self._path)})
        except OSError as exc:
            logger.warning("File watching not available, using static policy", extra={"error": str(exc)})
            self._observer = None

    def stop_watching(self) -> None:
        """Safe to call even if not watching."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    def get_policy(self) -> EnginePolicy:
        with self._lock:
            if self._policy is None:
                raise RuntimeError("Ticket policy not loaded")
            return self._policy
