"""Windows-specific drive listing implementation."""
import ctypes
import logging
import string
from typing import List, Optional

from drive_scanner.drivelist.detection import DriveLister
from drive_scanner.drivelist.models import Drive, DriveListError, Mountpoint
from drive_scanner.drivelist.strategies.utils import as_int, build_description, clean_string

logger = logging.getLogger(__name__)

# GetDriveTypeW return values
DRIVE_REMOVABLE = 2
DRIVE_FIXED = 3

# Win32_DiskDrive.Capabilities value meaning "Supports Writing"
CAPABILITY_SUPPORTS_WRITING = 4


class WindowsDriveLister(DriveLister):
    """Drive lister implementation for Windows."""

    def list_drives(self) -> List[Drive]:
        """
        List drives on Windows systems.

        Returns:
            One Drive per physical disk, or per drive letter without WMI
        """
        if self._is_wmi_available():
            logger.debug("Using WMI for Windows drive listing")

            # WMI needs COM initialised on the calling thread
            import pythoncom
            pythoncom.CoInitialize()

            try:
                return self._list_with_wmi()
            except Exception as e:
                raise DriveListError(f"WMI drive listing failed: {e}") from e
            finally:
                pythoncom.CoUninitialize()

        logger.debug("Using drive letters for Windows drive listing")
        return self._list_with_drive_letters()

    def _is_wmi_available(self) -> bool:
        """Check if WMI is available."""
        try:
            import wmi
            return True
        except ImportError:
            return False

    def _list_with_wmi(self) -> List[Drive]:
        """List physical disks using WMI."""
        import wmi
        connection = wmi.WMI()
        drives = []

        for disk in connection.Win32_DiskDrive():
            mountpoints = []
            for partition in disk.associators("Win32_DiskDriveToDiskPartition"):
                for logical_disk in partition.associators("Win32_LogicalDiskToPartition"):
                    mountpoints.append(Mountpoint(path=f"{logical_disk.DeviceID}\\"))

            drive = Drive(
                device=disk.DeviceID,
                raw=disk.DeviceID,
                description=clean_string(disk.Caption or disk.Model),
                size=as_int(disk.Size),
                mountpoints=mountpoints,
                system=is_system_disk(disk.MediaType, disk.InterfaceType),
                protected=CAPABILITY_SUPPORTS_WRITING not in (disk.Capabilities or ()),
            )

            drives.append(drive)
            logger.debug(f"Found physical drive: {drive}")

        return drives

    def _list_with_drive_letters(self) -> List[Drive]:
        """List removable and fixed drive letters using Win32 APIs."""
        kernel32 = ctypes.windll.kernel32
        bitmask = kernel32.GetLogicalDrives()
        if not bitmask:
            raise DriveListError("GetLogicalDrives returned no drives")

        drives = []
        for index, letter in enumerate(string.ascii_uppercase):
            if not bitmask & (1 << index):
                continue

            root = f"{letter}:\\"
            drive_type = kernel32.GetDriveTypeW(ctypes.c_wchar_p(root))
            if drive_type not in (DRIVE_REMOVABLE, DRIVE_FIXED):
                continue

            drive = Drive(
                device=f"\\\\.\\{letter}:",
                raw=f"\\\\.\\{letter}:",
                description=build_description(self._get_volume_label(root)) or f"Drive {letter}",
                size=self._get_total_size(root),
                mountpoints=[Mountpoint(path=root)],
                system=drive_type == DRIVE_FIXED,
            )

            drives.append(drive)
            logger.debug(f"Found drive letter: {drive}")

        return drives

    def _get_volume_label(self, root: str) -> str:
        """Get the volume label of a drive root."""
        kernel32 = ctypes.windll.kernel32
        volume_name_buffer = ctypes.create_unicode_buffer(1024)

        if kernel32.GetVolumeInformationW(
                ctypes.c_wchar_p(root), volume_name_buffer, 1024,
                None, None, None, None, 0
        ):
            return volume_name_buffer.value
        return ""

    def _get_total_size(self, root: str) -> Optional[int]:
        """Get the capacity of a drive root in bytes."""
        kernel32 = ctypes.windll.kernel32
        free_bytes = ctypes.c_ulonglong(0)
        total_bytes = ctypes.c_ulonglong(0)
        total_free_bytes = ctypes.c_ulonglong(0)

        if kernel32.GetDiskFreeSpaceExW(
                ctypes.c_wchar_p(root),
                ctypes.byref(free_bytes),
                ctypes.byref(total_bytes),
                ctypes.byref(total_free_bytes)
        ):
            return total_bytes.value
        return None


def is_system_disk(media_type: Optional[str], interface_type: Optional[str]) -> bool:
    """Whether a WMI disk should be treated as a system drive."""
    media_type = (media_type or "").lower()
    interface_type = (interface_type or "").lower()

    if "removable" in media_type or "external" in media_type:
        return False
    return interface_type != "usb"
