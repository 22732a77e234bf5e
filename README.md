# luix

The data structures and algorithms of a small x86-64 kernel, written as a
plain Python library. Everything works on integers and byte buffers, so it
can be used to inspect, decode and simulate what such a kernel handles.
The package has no runtime dependencies.

## Modules

- `luix.address`: `PhysicalAddress` and `VirtualAddress`, 64-bit addresses
  with `align_down`, addition of an integer offset, and for virtual
  addresses `page_offset` and the 9-bit `p1_index` to `p4_index` page-table
  indices.
- `luix.frame`: `PhysicalFrame` (4 KiB frames, `containing_address`,
  `size`) and `range_inclusive` over a run of frames.
- `luix.frame_allocator`: `MemoryMapEntry`, `EntryType`,
  `calculate_available_memory`, and `FrameAllocator`, which hands out frames
  from the usable entries of a memory map and reuses freed frames first.
- `luix.heap`: `LinkedListAllocator`, a first-fit free-list allocator that
  merges neighbouring free blocks, plus `align_up`.
- `luix.elf`: `ElfFile.parse` for 64-bit little-endian ELF images, with the
  ELF header, program headers and section headers. Malformed input raises
  `ElfError`.
- `luix.loader`: `load` copies the `LOAD` segments of an `ElfFile` into a
  `ProcessImage` (ten pages starting at `0xF00DC0DE000`) and works out its
  entry point and initial stack pointer.
- `luix.block_device`: the abstract `BlockDevice` and `MemoryBlockDevice`,
  backed by bytes in memory or loaded from an image file.
- `luix.fat_directory`: `DirectoryEntry.from_sector` decodes one 32-byte
  FAT short-name directory entry; free and deleted slots give `None`.
- `luix.path`: `Path`, an absolute path whose components can be iterated.
- `luix.nvme_command`: building and encoding NVMe commands (`NvmeCommand`)
  and decoding identify data (`IdentifyController`, `IdentifyNamespace`,
  `Namespace`).
- `luix.nvme_queue`: `SubmissionQueue`, `CompletionQueue` with phase-tag
  tracking, `NvmeCompletion` and `doorbell_offset`.
- `luix.pci`: configuration addresses (`pci_address`, `pci_read`,
  `pci_write`) over a `ConfigSpace` you supply, `PciScanner` for finding
  devices, and `PciDevice` with BAR decoding and capability lists.
- `luix.keyboard`: scan code set 1 (`ScanCodeSet1`), `KeyCode`, `KeyEvent`
  and a `Keyboard` that buffers key presses.
- `luix.ring_buffer`: `RingBuffer`, a fixed-size ring that drops its oldest
  entry when full. A ring of capacity `n` holds `n - 1` items.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

### Allocating from a memory map

```python
from luix.frame_allocator import EntryType, FrameAllocator, MemoryMapEntry, calculate_available_memory

entries = [
    MemoryMapEntry(base=0x0, length=0x1000, entry_type=EntryType.RESERVED),
    MemoryMapEntry(base=0x100000, length=0x4000, entry_type=EntryType.USABLE),
]
print(calculate_available_memory(entries))   # 16384

allocator = FrameAllocator(entries)
frame = allocator.allocate_frame()           # frame at 0x100000
allocator.deallocate_frames(frame.start_address, 4096)
```

`allocate_frames` raises `MemoryError` when no usable memory is left.

### The heap allocator

```python
from luix.heap import LinkedListAllocator

heap = LinkedListAllocator()
heap.init(0xFEED_CAFF_000, 2048)
a = heap.alloc_block(1024, 1)   # 0xFEEDCAFF000
heap.dealloc_block(a, 1024, 1)
print(heap.free_blocks())       # one FreeBlock of 2048 bytes again
```

`alloc_block` raises `MemoryError` when no free block is large enough.

### Parsing and loading an ELF file

```python
from luix.elf import ElfFile
from luix.loader import load

with open("program.elf", "rb") as f:
    elf = ElfFile.parse(f.read())

print(hex(elf.entry_point()))
image = load(elf)
print(hex(image.entry_point), hex(image.stack_pointer))
```

### Decoding FAT directory entries from a disk image

```python
from luix.block_device import MemoryBlockDevice
from luix.fat_directory import DirectoryEntry

device = MemoryBlockDevice.from_file("disk.img", 512)
sector = device.read_block(0x52A + 2048, 512)
for offset in range(0, 512, 32):
    entry = DirectoryEntry.from_sector(sector, offset)
    if entry is not None and not entry.is_long_name():
        print(entry.file_name(), entry.cluster(), entry.size)
```

`MemoryBlockDevice` keeps writes in memory; they are not written back to
the file.

### Scanning PCI devices

```python
from luix.pci import ConfigSpace, PciScanner

header = bytearray(64)
header[0:2] = (0x1B36).to_bytes(2, "little")   # vendor id
header[2:4] = (0x0010).to_bytes(2, "little")   # device id
header[0x0A] = 0x08                             # subclass: NVMe
header[0x0B] = 0x01                             # class: mass storage

scanner = PciScanner(ConfigSpace({(0, 3, 0): header}))
scanner.scan_devices()
for device in scanner.storage_devices():
    print(device)
    device.enable_mmio()
```

### NVMe commands and queues

```python
from luix.nvme_command import NvmeCommand, NvmeIoCommand
from luix.nvme_queue import CompletionQueue, NvmeCompletion, SubmissionQueue

command = NvmeCommand.create_read_write(NvmeIoCommand.READ, 1, 0x200000, 512, 512, 1)
raw = command.to_bytes()   # 64 bytes

submissions = SubmissionQueue(1, 10, doorbell=lambda offset, value: print(offset, value))
submissions.submit_command(command)

completions = CompletionQueue(1, 10)
completions.post(NvmeCompletion(command_id=0))
print(completions.poll().is_success())   # True
```

### Keyboard input

```python
from luix.keyboard import Keyboard

keyboard = Keyboard()
keyboard.handle_key(0x1E)   # press "a"
keyboard.handle_key(0x9E)   # release, ignored
print(keyboard.next_event().decode())   # "a"
```

## What the package does not do

- It does not read GUID partition tables, and it has no FAT32 file system:
  it decodes single directory entries, but does not parse boot sectors,
  follow cluster chains, walk directories, or open and read files by path.
- It does not model NVMe controller registers or drive a controller; it
  builds commands and simulates the queues only.
- It has no system call layer and does not run programs. `load` only lays
  out a process image in memory.
- It provides no command-line program.