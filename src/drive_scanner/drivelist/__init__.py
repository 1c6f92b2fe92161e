"""
Drive listing.

Provides cross-platform listing of the block devices attached to the host.
"""

from drive_scanner.drivelist.detection import DriveLister, DriveListerFactory, list_drives
from drive_scanner.drivelist.models import Drive, DriveListError, Mountpoint

__all__ = [
    'Drive',
    'DriveListError',
    'DriveLister',
    'DriveListerFactory',
    'Mountpoint',
    'list_drives',
]
