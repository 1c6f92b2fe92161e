"""macOS-specific drive listing implementation."""
import logging
import plistlib
from typing import Any, Dict, List

from drive_scanner.drivelist.detection import DriveLister
from drive_scanner.drivelist.models import Drive, DriveListError, Mountpoint
from drive_scanner.drivelist.strategies.utils import as_int, clean_string, run_command

logger = logging.getLogger(__name__)


class MacOSDriveLister(DriveLister):
    """Drive lister implementation for macOS."""

    def list_drives(self) -> List[Drive]:
        """
        List drives on macOS systems using diskutil.

        Returns:
            One Drive per physical whole disk
        """
        disks = self._load_plist(["diskutil", "list", "-plist"])
        drives = []

        for entry in disks.get("AllDisksAndPartitions", []):
            disk_id = entry.get("DeviceIdentifier")
            if not disk_id:
                continue

            info = self._load_plist(["diskutil", "info", "-plist", disk_id])
            if info.get("VirtualOrPhysical") == "Virtual":
                # Synthesized APFS containers mirror a physical disk
                continue

            drive = build_drive(disk_id, entry, info)
            drives.append(drive)
            logger.debug(f"Found disk: {drive}")

        return drives

    def _load_plist(self, args: List[str]) -> Dict[str, Any]:
        output = run_command(args)
        try:
            return plistlib.loads(output.encode("utf-8"))
        except Exception as e:
            raise DriveListError(f"Could not parse {' '.join(args[:2])} output: {e}") from e


def build_drive(disk_id: str, entry: Dict[str, Any], info: Dict[str, Any]) -> Drive:
    """Build a drive descriptor from diskutil list and info entries."""
    removable = bool(info.get("RemovableMedia") or info.get("Removable") or info.get("Ejectable"))
    internal = bool(info.get("Internal"))

    return Drive(
        device=f"/dev/{disk_id}",
        raw=f"/dev/r{disk_id}",
        description=clean_string(info.get("MediaName") or info.get("IORegistryEntryName")),
        size=as_int(info.get("TotalSize") or info.get("Size") or entry.get("Size")),
        mountpoints=[Mountpoint(path=path) for path in _collect_mountpoints(entry)],
        system=internal and not removable,
        protected=not info.get("WritableMedia", True),
    )


def _collect_mountpoints(entry: Dict[str, Any]) -> List[str]:
    """Mount points of a whole disk, its partitions and APFS volumes."""
    mountpoints = []

    if entry.get("MountPoint"):
        mountpoints.append(entry["MountPoint"])

    for child in entry.get("Partitions", []) + entry.get("APFSVolumes", []):
        if child.get("MountPoint"):
            mountpoints.append(child["MountPoint"])

    return mountpoints
