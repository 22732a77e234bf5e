"""PCI configuration space access, device scanning and capability lists."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from luix.address import PhysicalAddress

logger = logging.getLogger(__name__)

CONFIG_SPACE_SIZE = 256
DEVICE_CLASS_STORAGE = 0x01
PCI_CAPABILITIES = 0x34
PCI_COMMAND = 0x04
_ENABLE_BIT = 0x8000_0000
_U32_MASK = 0xFFFF_FFFF
_ABSENT = 0xFFFF_FFFF
_NO_VENDOR = 0xFFFF
_BUS_COUNT = 256
_DEVICES_PER_BUS = 32
_FUNCTIONS_PER_DEVICE = 8
_BAR_OFFSETS = (0x10, 0x14, 0x18, 0x1C, 0x20, 0x24)


def _check_range(name: str, value: int, limit: int) -> None:
    if not 0 <= value < limit:
        raise ValueError(f"{name} must be in 0..{limit - 1}, got {value}")


def pci_address(bus: int, device: int, function: int, offset: int) -> int:
    """The configuration address selecting the dword that holds ``offset``."""
    _check_range("bus", bus, _BUS_COUNT)
    _check_range("device", device, _DEVICES_PER_BUS)
    _check_range("function", function, _FUNCTIONS_PER_DEVICE)
    _check_range("offset", offset, CONFIG_SPACE_SIZE)
    return (bus << 16) | (device << 11) | (function << 8) | (offset & 0xFC) | _ENABLE_BIT


@dataclass
class ConfigSpace:
    """Configuration space of the functions present, keyed by (bus, device, function).

    Reads of functions that are not present return all ones, as on real hardware.
    """

    functions: dict[tuple[int, int, int], bytearray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: dict[tuple[int, int, int], bytearray] = {}
        for location, data in self.functions.items():
            if len(data) > CONFIG_SPACE_SIZE:
                raise ValueError(f"configuration space of {location} exceeds 256 bytes")
            normalized[location] = bytearray(data).ljust(CONFIG_SPACE_SIZE, b"\0")
        self.functions = normalized

    @staticmethod
    def _decode(address: int) -> tuple[tuple[int, int, int], int]:
        location = ((address >> 16) & 0xFF, (address >> 11) & 0x1F, (address >> 8) & 0x7)
        return location, address & 0xFC

    def read_32(self, address: int) -> int:
        """Read the dword selected by a configuration address."""
        if not address & _ENABLE_BIT:
            return _ABSENT
        location, register = self._decode(address)
        data = self.functions.get(location)
        if data is None:
            return _ABSENT
        return int.from_bytes(data[register:register + 4], "little")

    def write_32(self, address: int, value: int) -> None:
        """Write the dword selected by a configuration address."""
        if not address & _ENABLE_BIT:
            return
        location, register = self._decode(address)
        data = self.functions.get(location)
        if data is None:
            return
        data[register:register + 4] = (value & _U32_MASK).to_bytes(4, "little")


def pci_read(
    config_space: ConfigSpace, bus: int, device: int, function: int, offset: int
) -> int:
    """Read from ``offset``, shifted so the addressed byte is the lowest one."""
    address = pci_address(bus, device, function, offset)
    return (config_space.read_32(address) >> ((offset & 0x03) * 8)) & _U32_MASK


def pci_write(
    config_space: ConfigSpace, bus: int, device: int, function: int, offset: int, value: int
) -> None:
    """Write a whole dword at the dword holding ``offset``."""
    config_space.write_32(pci_address(bus, device, function, offset), value)


class CapabilityKind(Enum):
    POWER_MANAGEMENT = "power_management"
    PCIE = "pcie"
    MSI = "msi"
    MSIX = "msix"
    OTHER = "other"


_CAPABILITY_IDS = {
    0x01: CapabilityKind.POWER_MANAGEMENT,
    0x05: CapabilityKind.MSI,
    0x10: CapabilityKind.PCIE,
    0x11: CapabilityKind.MSIX,
}


@dataclass(frozen=True)
class MsixCapability:
    message_control: int
    table_off_and_bar: int
    pba_off_and_bar: int


@dataclass(frozen=True)
class Capability:
    """A capability; ``offset`` points just past its id and next pointer."""

    kind: CapabilityKind
    offset: int
    msix: Optional[MsixCapability] = None


@dataclass(frozen=True)
class PciDevice:
    """A PCI function found while scanning."""

    config_space: ConfigSpace = field(repr=False, compare=False)
    bus: int
    device: int
    function: int
    vendor_id: int
    device_id: int
    class_code: int
    subclass: int
    bars: tuple[int, ...]
    header_type: int

    def read(self, offset: int) -> int:
        return pci_read(self.config_space, self.bus, self.device, self.function, offset)

    def write(self, offset: int, value: int) -> None:
        pci_write(self.config_space, self.bus, self.device, self.function, offset, value)

    def _set_command_bit(self, bit: int) -> None:
        self.write(PCI_COMMAND, self.read(PCI_COMMAND) | (1 << bit))

    def enable_bus_mastering(self) -> None:
        self._set_command_bit(2)

    def enable_mmio(self) -> None:
        self._set_command_bit(1)

    def capabilities(self) -> Iterator[tuple[int, Capability]]:
        """Yield (offset, capability) for each entry of the capability list."""
        offset = self.read(PCI_CAPABILITIES) & 0xFF
        seen: set[int] = set()
        while offset != 0:
            if offset in seen:
                raise ValueError(f"capability list loops back to {offset:#x}")
            seen.add(offset)
            current = offset
            offset = self.read(current + 1) & 0xFF
            capability_id = self.read(current) & 0xFF
            capability_offset = current + 2
            kind = _CAPABILITY_IDS.get(capability_id, CapabilityKind.OTHER)
            msix = None
            if kind is CapabilityKind.MSIX:
                msix = MsixCapability(
                    message_control=self.read(current + 2) & 0xFFFF,
                    table_off_and_bar=self.read(current + 4),
                    pba_off_and_bar=self.read(capability_offset + 8),
                )
            yield current, Capability(kind, capability_offset, msix)

    def bar_memory_address(self, index: int = 0) -> PhysicalAddress:
        """The memory address in BAR ``index``, joined with the next BAR if 64-bit."""
        bar_lower = self.bars[index]
        bar_type = (bar_lower >> 1) & 0b11
        bar_lower &= 0xFFFF_FFF0
        if bar_type == 0b00:
            return PhysicalAddress(bar_lower)
        if index + 1 >= len(self.bars):
            raise ValueError(f"64-bit BAR {index} has no upper half")
        return PhysicalAddress((self.bars[index + 1] << 32) | bar_lower)

    def __str__(self) -> str:
        return (
            f"device: {self.bus:02x}:{self.device:02x}.{self.function:x} "
            f"vendor: {self.vendor_id:04x} deviceId: {self.device_id:04x} "
            f"Class: {self.class_code:02x} Sub class: {self.subclass:02x}"
        )


class PciScanner:
    """Finds every PCI function present in a configuration space."""

    def __init__(self, config_space: ConfigSpace) -> None:
        self.config_space = config_space
        self.devices: list[PciDevice] = []

    def scan_devices(self) -> list[PciDevice]:
        """Probe every bus, device and function and record those present."""
        space = self.config_space
        for bus in range(_BUS_COUNT):
            for device in range(_DEVICES_PER_BUS):
                for function in range(_FUNCTIONS_PER_DEVICE):
                    vendor_id = pci_read(space, bus, device, function, 0) & 0xFFFF
                    if vendor_id == _NO_VENDOR:
                        continue
                    found = PciDevice(
                        config_space=space,
                        bus=bus,
                        device=device,
                        function=function,
                        vendor_id=vendor_id,
                        device_id=pci_read(space, bus, device, function, 0x2) & 0xFFFF,
                        class_code=pci_read(space, bus, device, function, 0xB) & 0xFF,
                        subclass=pci_read(space, bus, device, function, 0xA) & 0xFF,
                        bars=tuple(
                            pci_read(space, bus, device, function, bar) for bar in _BAR_OFFSETS
                        ),
                        header_type=pci_read(space, bus, device, function, 0xE) & 0xFF,
                    )
                    logger.info("Found PCI Device: %s", found)
                    self.devices.append(found)
        return self.devices

    def storage_devices(self) -> Iterator[PciDevice]:
        """The mass storage controllers among the scanned devices."""
        return (device for device in self.devices if device.class_code == DEVICE_CLASS_STORAGE)