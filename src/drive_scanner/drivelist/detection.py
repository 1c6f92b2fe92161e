"""Drive listing entry points."""
import platform
from abc import ABC, abstractmethod
from typing import List

from drive_scanner.drivelist.models import Drive, DriveListError


class DriveLister(ABC):
    """Base interface for drive listing strategies."""

    @abstractmethod
    def list_drives(self) -> List[Drive]:
        """
        List the block devices attached to the host.

        Returns:
            Drive descriptors in the order the platform reports them

        Raises:
            DriveListError: If the platform tooling failed
        """
        pass


class UnsupportedPlatformLister(DriveLister):
    """Lister for platforms without a listing strategy."""

    def __init__(self, system: str):
        self.system = system

    def list_drives(self) -> List[Drive]:
        raise DriveListError(f"Drive listing is not supported on {self.system or 'this platform'}")


class DriveListerFactory:
    """Factory for creating appropriate drive lister based on platform."""

    @staticmethod
    def create_lister() -> DriveLister:
        """Create a drive lister for the current platform."""
        system = platform.system()

        if system == "Windows":
            from drive_scanner.drivelist.strategies.windows import WindowsDriveLister
            return WindowsDriveLister()
        elif system == "Linux":
            from drive_scanner.drivelist.strategies.linux import LinuxDriveLister
            return LinuxDriveLister()
        elif system == "Darwin":
            from drive_scanner.drivelist.strategies.macos import MacOSDriveLister
            return MacOSDriveLister()
        else:
            return UnsupportedPlatformLister(system)


def list_drives() -> List[Drive]:
    """List the drives of the current host."""
    return DriveListerFactory.create_lister().list_drives()
