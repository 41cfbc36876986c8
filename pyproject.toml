[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "n64emu"
version = "0.1.0"
description = "Nintendo 64 emulator components: RSP vector unit, TLB, save memory, video interface timing and input configuration"
requires-python = ">=3.10"
keywords = ["n64", "emulator", "rsp", "tlb", "flashram", "sram", "input"]
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
    "Topic :: System :: Emulators",
]
dependencies = [
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
n64emu = "n64emu.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["n64emu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
