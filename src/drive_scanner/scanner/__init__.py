from drive_scanner.scanner.drive_scanner import DriveScanner, filter_system_drives, process_drives
from drive_scanner.scanner.events import DRIVES_EVENT, ERROR_EVENT, DriveScannerEvents

__all__ = [
    'DRIVES_EVENT',
    'ERROR_EVENT',
    'DriveScanner',
    'DriveScannerEvents',
    'filter_system_drives',
    'process_drives',
]
