from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Mountpoint:
    """A path a drive (or one of its partitions) is mounted on."""
    path: str


@dataclass
class Drive:
    """Represents a block device as reported by the host."""
    device: str  # Device identifier, e.g. /dev/sda or \\.\PHYSICALDRIVE0
    raw: Optional[str] = None
    description: str = ""
    size: Optional[int] = None
    mountpoints: List[Mountpoint] = field(default_factory=list)
    system: bool = False
    protected: bool = False
    name: Optional[str] = None  # Display name, set by the scanner

    def __str__(self) -> str:
        return f"{self.device} - {self.description or 'Unknown'} ({self.size or 0} bytes)"

    def get_formatted_size(self) -> str:
        """Get human-readable size."""
        if not self.size:
            return "Unknown"
        size = float(self.size)
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024:
                return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
            size /= 1024
        return f"{size:.1f} TB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "device": self.device,
            "raw": self.raw,
            "description": self.description,
            "size": self.size,
            "mountpoints": [{"path": mountpoint.path} for mountpoint in self.mountpoints],
            "system": self.system,
            "protected": self.protected,
            "name": self.name,
        }


class DriveListError(Exception):
    """Raised when the host's drives could not be listed."""
