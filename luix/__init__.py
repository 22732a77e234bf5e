"""Memory, disk and device structures of a small kernel: addresses, allocators, ELF, FAT directory entries, NVMe, PCI and keyboard decoding."""

__version__ = "0.1.0"