import sys
from unittest import mock

import pytest

from drive_scanner.drivelist import DriveListError, Mountpoint
from drive_scanner.drivelist.strategies.windows import WindowsDriveLister, is_system_disk


def make_wmi_disk(device_id, caption, media_type, interface_type, letters=(), capabilities=(3, 4), size="1000"):
    """Build a fake Win32_DiskDrive with its partitions and logical disks."""
    partition = mock.MagicMock()
    partition.associators.return_value = [mock.MagicMock(DeviceID=letter) for letter in letters]

    disk = mock.MagicMock(
        DeviceID=device_id,
        Caption=caption,
        Model=caption,
        MediaType=media_type,
        InterfaceType=interface_type,
        Capabilities=capabilities,
        Size=size,
    )
    disk.associators.return_value = [partition] if letters else []
    return disk


class TestIsSystemDisk:
    """Tests for classifying WMI disks."""

    @pytest.mark.parametrize("media_type, interface_type, expected", [
        ("Fixed hard disk media", "SCSI", True),
        ("Fixed hard disk media", "USB", False),
        ("Removable Media", "USB", False),
        ("External hard disk media", "SCSI", False),
        (None, None, True),
    ])
    def test_classification(self, media_type, interface_type, expected):
        assert is_system_disk(media_type, interface_type) is expected


class TestWindowsDriveLister:
    """Tests for the WMI based lister."""

    @pytest.fixture
    def fake_wmi(self):
        """Install fake wmi and pythoncom modules."""
        wmi_module = mock.MagicMock()
        pythoncom_module = mock.MagicMock()
        with mock.patch.dict(sys.modules, {"wmi": wmi_module, "pythoncom": pythoncom_module}):
            yield wmi_module, pythoncom_module

    def test_lists_physical_disks(self, fake_wmi):
        wmi_module, pythoncom_module = fake_wmi
        wmi_module.WMI.return_value.Win32_DiskDrive.return_value = [
            make_wmi_disk("\\\\.\\PHYSICALDRIVE0", "Samsung SSD 970", "Fixed hard disk media", "SCSI",
                          letters=["C:"], size="500107862016"),
            make_wmi_disk("\\\\.\\PHYSICALDRIVE1", "SanDisk Cruzer USB Device", "Removable Media", "USB",
                          letters=["D:", "E:"], capabilities=(3, 7)),
        ]

        drives = WindowsDriveLister().list_drives()

        assert [drive.device for drive in drives] == ["\\\\.\\PHYSICALDRIVE0", "\\\\.\\PHYSICALDRIVE1"]
        assert drives[0].system is True
        assert drives[0].size == 500107862016
        assert drives[0].mountpoints == [Mountpoint(path="C:\\")]
        assert drives[1].system is False
        assert drives[1].protected is True
        assert [mountpoint.path for mountpoint in drives[1].mountpoints] == ["D:\\", "E:\\"]

        pythoncom_module.CoInitialize.assert_called_once()
        pythoncom_module.CoUninitialize.assert_called_once()

    def test_wmi_failure_raises(self, fake_wmi):
        wmi_module, pythoncom_module = fake_wmi
        wmi_module.WMI.side_effect = RuntimeError("RPC server is unavailable")

        with pytest.raises(DriveListError, match="WMI drive listing failed"):
            WindowsDriveLister().list_drives()

        pythoncom_module.CoUninitialize.assert_called_once()

    def test_falls_back_to_drive_letters_without_wmi(self):
        lister = WindowsDriveLister()
        with mock.patch.object(lister, "_is_wmi_available", return_value=False), \
                mock.patch.object(lister, "_list_with_drive_letters", return_value=[]) as mock_letters:
            assert lister.list_drives() == []

        mock_letters.assert_called_once()
