"""NVMe commands and identify data structures."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, SupportsInt

NVME_ADMIN_CREATE_SUBMISSION_QUEUE = 0x01
NVME_ADMIN_CREATE_COMPLETION_QUEUE = 0x05
NVME_ADMIN_IDENTIFY = 0x06

_U32_MASK = 0xFFFF_FFFF
_COMMAND = struct.Struct("<BBHI2IQ2Q6I")
_IDENTIFY_CONTROLLER = struct.Struct(
    "<HH20s40s8sB3sBBHIIIII156xHBBBBBBBBHHHII16s16sIHBBHHHHIIH174xBBHI"
)
_LBA_FORMAT = struct.Struct("<HBB")
_LBA_FORMAT_COUNT = 16
_IDENTIFY_NAMESPACE = struct.Struct("<QQQ10B7H16s5H54x")


class NvmeAdminIdentifyCns(IntEnum):
    IDENTIFY_NAMESPACE = 0x0
    IDENTIFY_CONTROLLER = 0x1
    IDENTIFY_NAMESPACES_ID = 0x2


class NvmeIoCommand(IntEnum):
    WRITE = 0x1
    READ = 0x2


def _check_length(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass
class NvmeCommand:
    """A 64-byte submission queue entry."""

    SIZE: ClassVar[int] = _COMMAND.size

    opcode: int
    flags: int = 0
    command_id: int = 0
    nsid: int = 0
    reserved0: tuple[int, int] = (0, 0)
    metadata_ptr: int = 0
    dptr: tuple[int, int] = (0, 0)
    cdw10: int = 0
    cdw11: int = 0
    cdw12: int = 0
    cdw13: int = 0
    cdw14: int = 0
    cdw15: int = 0

    @classmethod
    def create_identify(
        cls, data_ptr: int, cns: NvmeAdminIdentifyCns, namespace_id: int = 0
    ) -> NvmeCommand:
        return cls(
            opcode=NVME_ADMIN_IDENTIFY,
            nsid=namespace_id,
            dptr=(int(data_ptr), 0),
            cdw10=int(cns),
        )

    @classmethod
    def create_completion_queue(
        cls, address: SupportsInt, queue_id: int, queue_size: int
    ) -> NvmeCommand:
        return cls(
            opcode=NVME_ADMIN_CREATE_COMPLETION_QUEUE,
            dptr=(int(address), 0),
            cdw10=(queue_id | queue_size << 16) & _U32_MASK,
            cdw11=1,
        )

    @classmethod
    def create_submission_queue(
        cls, address: SupportsInt, queue_id: int, queue_size: int
    ) -> NvmeCommand:
        return cls(
            opcode=NVME_ADMIN_CREATE_SUBMISSION_QUEUE,
            dptr=(int(address), 0),
            cdw10=(queue_id | queue_size << 16) & _U32_MASK,
            cdw11=(1 | queue_id << 16) & _U32_MASK,
        )

    @classmethod
    def create_read_write(
        cls,
        opcode: NvmeIoCommand,
        sector: int,
        data_address: SupportsInt,
        data_len: int,
        block_size: int,
        nsid: int,
    ) -> NvmeCommand:
        """A read or write of ``data_len`` bytes, rounded up to whole blocks."""
        if data_len <= 0:
            raise ValueError(f"data length must be positive, got {data_len}")
        if block_size <= 0:
            raise ValueError(f"block size must be positive, got {block_size}")
        blocks = -(-data_len // block_size)
        return cls(
            opcode=int(opcode),
            nsid=nsid,
            dptr=(int(data_address), 0),
            cdw10=sector & _U32_MASK,
            cdw12=(blocks - 1) & _U32_MASK,
        )

    def to_bytes(self) -> bytes:
        return _COMMAND.pack(
            self.opcode,
            self.flags,
            self.command_id,
            self.nsid,
            *self.reserved0,
            self.metadata_ptr,
            *self.dptr,
            self.cdw10,
            self.cdw11,
            self.cdw12,
            self.cdw13,
            self.cdw14,
            self.cdw15,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> NvmeCommand:
        _check_length(data, _COMMAND.size, "NVMe command")
        (opcode, flags, command_id, nsid, r0, r1, metadata_ptr, d0, d1, *cdws) = (
            _COMMAND.unpack_from(data)
        )
        return cls(opcode, flags, command_id, nsid, (r0, r1), metadata_ptr, (d0, d1), *cdws)


@dataclass(frozen=True)
class SerialNumber:
    """The 20-byte, space-padded controller serial number."""

    raw: bytes

    def __str__(self) -> str:
        return self.raw.decode("utf-8", errors="replace").strip()


@dataclass(frozen=True)
class IdentifyController:
    """Identify Controller data structure."""

    SIZE: ClassVar[int] = _IDENTIFY_CONTROLLER.size

    vendor_id: int
    subsystem_vendor_id: int
    serial_number: SerialNumber
    model_number: bytes
    firmware_version: bytes
    recommended_arbitration_burst: int
    ieee: bytes
    cmic: int
    maximum_data_transfer_size: int
    controller_id: int
    version: int
    rtd3r: int
    rtd3e: int
    oaes: int
    controller_attributes: int
    oacs: int
    acl: int
    aerl: int
    frmw: int
    lpa: int
    elpe: int
    npss: int
    avscc: int
    apsta: int
    wctemp: int
    cctemp: int
    mtfa: int
    hmpre: int
    hmmin: int
    tnvmcap: bytes
    unvmcap: bytes
    rpmbs: int
    edstt: int
    dsto: int
    fwug: int
    kas: int
    hctma: int
    mntmt: int
    mxtmt: int
    sanicap: int
    hmminds: int
    hmmaxd: int
    submission_queue_entry_size: int
    completion_queue_entry_size: int
    maximum_outstanding_commands: int
    number_of_namespaces: int

    @classmethod
    def from_bytes(cls, data: bytes) -> IdentifyController:
        _check_length(data, _IDENTIFY_CONTROLLER.size, "identify controller data")
        vendor_id, subsystem_vendor_id, serial, *rest = _IDENTIFY_CONTROLLER.unpack_from(data)
        return cls(vendor_id, subsystem_vendor_id, SerialNumber(serial), *rest)

    @property
    def model(self) -> str:
        return self.model_number.decode("utf-8", errors="replace").strip()

    def __repr__(self) -> str:
        return (
            f"IdentifyController(vendor_id={self.vendor_id}, "
            f"subsystem_vendor_id={self.subsystem_vendor_id}, "
            f"serial_number={str(self.serial_number)!r}, model_number={self.model!r}, "
            f"number_of_namespaces={self.number_of_namespaces})"
        )


@dataclass(frozen=True)
class LbaFormat:
    """An LBA format: metadata size, data size exponent and relative performance."""

    ms: int
    ds: int
    rp: int


@dataclass(frozen=True)
class Namespace:
    """A namespace's geometry."""

    namespace_id: int
    blocks: int
    block_size: int
    size: int


@dataclass(frozen=True)
class IdentifyNamespace:
    """Identify Namespace data structure."""

    SIZE: ClassVar[int] = _IDENTIFY_NAMESPACE.size + _LBA_FORMAT.size * _LBA_FORMAT_COUNT

    nsze: int
    ncap: int
    nuse: int
    nsfeat: int
    nlbaf: int
    flbas: int
    mc: int
    dpc: int
    dps: int
    nmic: int
    rescap: int
    fpi: int
    dlfeat: int
    nawun: int
    nawupf: int
    nacwu: int
    nabsn: int
    nabo: int
    nabspf: int
    noiob: int
    nvmcap: bytes
    npwg: int
    npwa: int
    npdg: int
    npda: int
    nows: int
    lbaf: tuple[LbaFormat, ...] = field(default_factory=tuple)

    @classmethod
    def from_bytes(cls, data: bytes) -> IdentifyNamespace:
        _check_length(data, cls.SIZE, "identify namespace data")
        fields = _IDENTIFY_NAMESPACE.unpack_from(data)
        formats = tuple(
            LbaFormat(*_LBA_FORMAT.unpack_from(data, _IDENTIFY_NAMESPACE.size + i * _LBA_FORMAT.size))
            for i in range(_LBA_FORMAT_COUNT)
        )
        return cls(*fields, lbaf=formats)

    def as_namespace(self, namespace_id: int) -> Namespace:
        """The namespace's geometry using its formatted LBA size."""
        index = self.flbas & 0b11111
        if index >= len(self.lbaf):
            raise ValueError(f"formatted LBA size index {index} has no LBA format")
        block_size = 1 << self.lbaf[index].ds
        return Namespace(namespace_id, self.nsze, block_size, self.nsze * block_size)