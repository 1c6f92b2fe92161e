import asyncio
import logging
import platform
from dataclasses import replace
from typing import Any, Iterable, List, Optional

from drive_scanner.drivelist import Drive, DriveLister
from drive_scanner.scanner.events import DRIVES_EVENT, ERROR_EVENT, DriveScannerEvents, Listener
from drive_scanner.services.settings_service import UNSAFE_MODE

logger = logging.getLogger(__name__)

DEFAULT_FIRST_SCAN_DELAY = 0.125
DEFAULT_SCAN_INTERVAL = 2.0


def process_drives(drives: Iterable[Drive], system: Optional[str] = None) -> List[Drive]:
    """
    Give every drive a display name.

    The name is the device identifier, except on Windows where drives with
    mount points are named after them ("D:\\, E:\\").
    """
    system = system or platform.system()
    processed = []

    for drive in drives:
        name = drive.device
        if system == "Windows" and drive.mountpoints:
            name = ", ".join(mountpoint.path for mountpoint in drive.mountpoints)
        processed.append(replace(drive, name=name))

    return processed


def filter_system_drives(drives: Iterable[Drive], unsafe_mode: bool) -> List[Drive]:
    """Drop system drives unless unsafe mode is enabled."""
    if unsafe_mode:
        return list(drives)
    return [drive for drive in drives if not drive.system]


class DriveScanner:
    """
    Periodically lists drives and publishes the result.

    Subscribers receive a "drives" event with the filtered drive list after
    every successful scan and an "error" event with the exception after every
    failed one. Scans never overlap: the next one is scheduled only once the
    current one has completed.

    Example:
        scanner = DriveScanner(lister, settings)
        scanner.on("drives", show_drives).on("error", show_error)
        scanner.start()
    """

    def __init__(self, lister: DriveLister, settings: Any,
                 first_scan_delay: float = DEFAULT_FIRST_SCAN_DELAY,
                 scan_interval: float = DEFAULT_SCAN_INTERVAL,
                 events: Optional[DriveScannerEvents] = None):
        """
        Initialize the drive scanner.

        Args:
            lister: Lists the drives of the host
            settings: Provides ``async get(key, default)``, read for "unsafe_mode"
            first_scan_delay: Seconds between start() and the first scan
            scan_interval: Seconds between the end of a scan and the next one
            events: Publisher to emit on, a new one by default
        """
        self._lister = lister
        self._settings = settings
        self.first_scan_delay = first_scan_delay
        self.scan_interval = scan_interval
        self.events = events or DriveScannerEvents()

        self._running = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._scan_task: Optional[asyncio.Task] = None

        self.scan_count = 0
        self.error_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_scanning(self) -> bool:
        """Whether a scan started by the timer has not completed yet."""
        return self._scan_task is not None and not self._scan_task.done()

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def on(self, event: str, callback: Listener) -> "DriveScanner":
        """Subscribe to "drives" or "error"; returns the scanner for chaining."""
        self.events.on(event, callback)
        return self

    def off(self, event: str, callback: Listener) -> bool:
        return self.events.off(event, callback)

    def start(self) -> None:
        """
        Start scanning.

        Must be called from the running event loop. Calling it while already
        running re-arms the first-scan timer in place of the pending one.
        """
        logger.debug("start")
        self._running = True

        if self.is_scanning:
            # The in-flight scan schedules the next one when it completes
            return

        self._arm(self.first_scan_delay)

    def stop(self) -> None:
        """
        Stop scanning.

        A scan already in flight still completes and emits its event, but no
        further scan is scheduled.
        """
        logger.debug("stop")
        self._running = False
        self._cancel_timer()

    async def run(self) -> None:
        """Run one scan, emit its outcome and schedule the next one."""
        if not self._running:
            return

        self.scan_count += 1

        try:
            drives = await self.scan()
        except Exception as e:
            self.error_count += 1
            logger.warning(f"Drive scan failed ({self.error_count}/{self.scan_count}): {e}")
            self.events.emit(ERROR_EVENT, e)
        else:
            logger.debug(f"scan {[drive.to_dict() for drive in drives]}")
            self.events.emit(DRIVES_EVENT, drives)

        if self._running:
            self._arm(self.scan_interval)

    async def scan(self, unsafe_mode: Optional[bool] = None) -> List[Drive]:
        """
        List, name and filter drives once.

        Args:
            unsafe_mode: Overrides the "unsafe_mode" setting when given
        """
        drives = await asyncio.to_thread(self._lister.list_drives)
        if unsafe_mode is None:
            unsafe_mode = await self._settings.get(UNSAFE_MODE, False)
        return filter_system_drives(process_drives(drives), unsafe_mode)

    async def wait_idle(self) -> None:
        """Wait for the in-flight scan, if any, to complete."""
        if self._scan_task is not None and not self._scan_task.done():
            await self._scan_task

    def _arm(self, delay: float) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        self._scan_task = asyncio.get_running_loop().create_task(self.run())
