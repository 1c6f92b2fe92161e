"""
Drive scanner.

Periodically lists the block devices attached to the host and publishes the
non-system drives to subscribers.
"""

from drive_scanner.drivelist import Drive, DriveListError, DriveLister, Mountpoint
from drive_scanner.scanner.drive_scanner import DriveScanner, filter_system_drives, process_drives

__version__ = "0.1.0"

__all__ = [
    'Drive',
    'DriveListError',
    'DriveLister',
    'DriveScanner',
    'Mountpoint',
    'filter_system_drives',
    'process_drives',
]
