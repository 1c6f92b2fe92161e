import json
import subprocess
from unittest.mock import patch

import pytest

from drive_scanner.drivelist import DriveListError, Mountpoint
from drive_scanner.drivelist.strategies.linux import LSBLK_COMMAND, LinuxDriveLister, parse_lsblk
from drive_scanner.drivelist.strategies.utils import run_command

LSBLK_OUTPUT = {
    "blockdevices": [
        {
            "name": "/dev/sda", "kname": "/dev/sda", "size": 512110190592, "type": "disk",
            "mountpoint": None, "model": "Samsung SSD 860", "vendor": "ATA     ",
            "rm": False, "hotplug": False, "ro": False, "tran": "sata",
            "children": [
                {"name": "/dev/sda1", "kname": "/dev/sda1", "size": 536870912, "type": "part",
                 "mountpoint": "/boot/efi", "rm": False, "hotplug": False, "ro": False},
                {"name": "/dev/sda2", "kname": "/dev/sda2", "size": 8589934592, "type": "part",
                 "mountpoint": "[SWAP]", "rm": False, "hotplug": False, "ro": False},
                {"name": "/dev/sda3", "kname": "/dev/sda3", "size": 502983319552, "type": "part",
                 "mountpoint": None, "rm": False, "hotplug": False, "ro": False,
                 "children": [
                     {"name": "/dev/mapper/root", "kname": "/dev/dm-0", "size": 502983319552,
                      "type": "crypt", "mountpoint": "/", "rm": False, "hotplug": False, "ro": False}
                 ]},
            ],
        },
        {
            "name": "/dev/sdb", "kname": "/dev/sdb", "size": "15376000000", "type": "disk",
            "mountpoint": None, "model": "Ultra Fit", "vendor": "SanDisk",
            "rm": "1", "hotplug": "1", "ro": "0", "tran": "usb",
            "children": [
                {"name": "/dev/sdb1", "kname": "/dev/sdb1", "size": "15375000000", "type": "part",
                 "mountpoint": "/media/user/USB", "rm": "1", "hotplug": "1", "ro": "0"}
            ],
        },
        {
            "name": "/dev/sr0", "kname": "/dev/sr0", "size": 1073741312, "type": "rom",
            "mountpoint": None, "model": "DVD-RW", "vendor": "HL-DT-ST",
            "rm": True, "hotplug": False, "ro": False, "tran": "sata",
        },
        {
            "name": "/dev/loop0", "kname": "/dev/loop0", "size": 4096, "type": "loop",
            "mountpoint": "/snap/core/1", "rm": False, "hotplug": False, "ro": True, "tran": None,
        },
        {
            "name": "/dev/sdc", "kname": "/dev/sdc", "size": 2000398934016, "type": "disk",
            "mountpoint": None, "model": "Expansion", "vendor": "Seagate",
            "rm": False, "hotplug": False, "ro": True, "tran": "usb",
        },
    ]
}


class TestParseLsblk:
    """Tests for lsblk output parsing."""

    def test_only_disks_are_listed(self):
        drives = parse_lsblk(LSBLK_OUTPUT)

        assert [drive.device for drive in drives] == ["/dev/sda", "/dev/sdb", "/dev/sdc"]

    def test_internal_disk_is_system(self):
        sda = parse_lsblk(LSBLK_OUTPUT)[0]

        assert sda.system is True
        assert sda.protected is False
        assert sda.size == 512110190592
        assert sda.description == "ATA Samsung SSD 860"

    def test_mountpoints_collected_from_descendants_in_order(self):
        sda = parse_lsblk(LSBLK_OUTPUT)[0]

        assert sda.mountpoints == [Mountpoint(path="/boot/efi"), Mountpoint(path="/")]

    def test_removable_disk_with_string_flags(self):
        sdb = parse_lsblk(LSBLK_OUTPUT)[1]

        assert sdb.system is False
        assert sdb.protected is False
        assert sdb.size == 15376000000
        assert sdb.mountpoints == [Mountpoint(path="/media/user/USB")]

    def test_usb_disk_is_not_system(self):
        sdc = parse_lsblk(LSBLK_OUTPUT)[2]

        assert sdc.system is False
        assert sdc.protected is True
        assert sdc.mountpoints == []

    def test_empty_output(self):
        assert parse_lsblk({}) == []
        assert parse_lsblk({"blockdevices": []}) == []


class TestLinuxDriveLister:
    """Tests for the lsblk based lister."""

    def test_list_drives_runs_lsblk(self):
        with patch("drive_scanner.drivelist.strategies.linux.run_command",
                   return_value=json.dumps(LSBLK_OUTPUT)) as mock_run:
            drives = LinuxDriveLister().list_drives()

        mock_run.assert_called_once_with(LSBLK_COMMAND)
        assert len(drives) == 3

    def test_invalid_json_raises(self):
        with patch("drive_scanner.drivelist.strategies.linux.run_command", return_value="not json"):
            with pytest.raises(DriveListError, match="Could not parse lsblk output"):
                LinuxDriveLister().list_drives()


class TestRunCommand:
    """Tests for running listing commands."""

    def test_returns_stdout(self):
        completed = subprocess.CompletedProcess(args=["lsblk"], returncode=0, stdout="{}", stderr="")
        with patch("subprocess.run", return_value=completed) as mock_run:
            assert run_command(["lsblk"]) == "{}"

        mock_run.assert_called_once_with(["lsblk"], capture_output=True, text=True, check=True)

    def test_missing_binary(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("lsblk")):
            with pytest.raises(DriveListError, match="lsblk is not available"):
                run_command(["lsblk"])

    def test_non_zero_exit(self):
        error = subprocess.CalledProcessError(32, ["lsblk"], output="", stderr="lsblk: failed to access sysfs\n")
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(DriveListError, match="status 32: lsblk: failed to access sysfs") as exc_info:
                run_command(["lsblk"])

        assert exc_info.value.__cause__ is error
