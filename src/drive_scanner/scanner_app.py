import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

from drive_scanner.config import AppConfig, config as default_config
from drive_scanner.db.sqlite import Database
from drive_scanner.drivelist import DriveLister, DriveListerFactory
from drive_scanner.scanner.drive_scanner import DriveScanner
from drive_scanner.services.settings_service import SettingsService, default_settings

logger = logging.getLogger(__name__)


class ScannerApp:
    """Wires the drive scanner to its collaborators and runs it."""

    def __init__(self, app_config: Optional[AppConfig] = None, lister: Optional[DriveLister] = None):
        """Initialize the scanner application."""
        self.config = app_config or default_config

        self.data_dir = Path(self.config.app.data_dir)
        self.db = Database(self.data_dir / self.config.db.path)
        self.settings = SettingsService(
            self.db, default_settings(unsafe_mode=self.config.app.unsafe_mode_default)
        )
        self.lister = lister or DriveListerFactory.create_lister()
        self.scanner = DriveScanner(
            self.lister,
            self.settings,
            first_scan_delay=self.config.scanner.first_scan_delay,
            scan_interval=self.config.scanner.scan_interval,
        )

        self._running = False
        self._stop_event = asyncio.Event()
        self._signals_installed = False

    async def initialize(self) -> None:
        """Open the settings store."""
        await self.db.initialize()
        await self.settings.initialize()

    async def start(self, install_signal_handlers: bool = True) -> None:
        """Start the scanner application."""
        if self._running:
            logger.warning("Scanner application is already running")
            return

        logger.info("Starting scanner application")
        self._running = True
        self._stop_event.clear()

        await self.initialize()
        self.scanner.start()

        if install_signal_handlers:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(self.stop(s)))
            self._signals_installed = True

        logger.info("Scanner application started")

    async def stop(self, sig=None) -> None:
        """Stop the scanner application."""
        if not self._running:
            return

        if sig:
            logger.info(f"Received signal {sig.name}, shutting down")
        else:
            logger.info("Shutting down scanner application")

        self._running = False

        if self._signals_installed:
            loop = asyncio.get_running_loop()
            for s in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(s)
            self._signals_installed = False

        self.scanner.stop()
        await self.scanner.wait_idle()

        await self.db.close()

        self._stop_event.set()
        logger.info(
            f"Scanner application stopped after {self.scanner.scan_count} scans "
            f"({self.scanner.error_count} failed)"
        )

    def is_running(self) -> bool:
        """Check if the scanner application is running."""
        return self._running

    async def wait_for_stop(self) -> None:
        """Wait for the application to stop."""
        await self._stop_event.wait()
