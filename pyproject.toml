[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "luix"
version = "0.1.0"
description = "Memory, disk and device structures of a small kernel: addresses, allocators, ELF, FAT directory entries, NVMe, PCI and keyboard decoding"
requires-python = ">=3.10"
dependencies = []
keywords = ["elf", "allocator", "nvme", "pci", "fat32", "kernel", "block-device"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: System :: Operating System Kernels",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["luix"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
