"""Cartridge SRAM and flash RAM save memory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

SRAM_MASK = 0xFFFF
SRAM_SIZE = 0x8000
FLASHRAM_SIZE = 0x20000
FLASHRAM_TYPE_ID = 0x11118001
MX29L1100_ID = 0x00C2001E
MX29L0000_ID = 0x00C20000
MX29L0001_ID = 0x00C20001
PAGE_SIZE = 128

_OLD_FLASH_IDS = frozenset({MX29L1100_ID, MX29L0000_ID, MX29L0001_ID})


class FlashramMode(Enum):
    """Operating mode of the flash chip."""

    READ_ARRAY = auto()
    READ_SILICON_ID = auto()
    STATUS = auto()
    SECTOR_ERASE = auto()
    CHIP_ERASE = auto()
    PAGE_PROGRAM = auto()


class FlashramError(RuntimeError):
    """An access or command the flash chip does not support."""


def masked_write(old: int, value: int, mask: int) -> int:
    """Replace the bits of ``old`` selected by ``mask`` with those of ``value``."""
    return ((old & ~mask) | (value & mask)) & 0xFFFFFFFF


def _check_range(buffer: bytearray, offset: int, length: int) -> None:
    if offset < 0 or offset + length > len(buffer):
        raise IndexError(f"range {offset:#x}+{length:#x} outside save of {len(buffer):#x} bytes")


@dataclass
class Flashram:
    """State of the flash chip."""

    status: int = 0
    mode: FlashramMode = FlashramMode.READ_ARRAY
    erase_page: int = 0
    page_buf: bytearray = field(default_factory=lambda: bytearray(PAGE_SIZE))
    silicon_id: tuple[int, int] = (FLASHRAM_TYPE_ID, MX29L1100_ID)


@dataclass
class SaveMemory:
    """SRAM or flash save data, as seen through the cartridge bus.

    ``uses_sram`` selects SRAM; otherwise accesses go to flash RAM.
    RDRAM passed to DMA methods must have a power-of-two length.
    """

    uses_sram: bool = True
    sram: bytearray = field(default_factory=bytearray)
    flash: bytearray = field(default_factory=bytearray)
    sram_dirty: bool = False
    flash_dirty: bool = False
    flashram: Flashram = field(default_factory=Flashram)

    def format_sram(self) -> None:
        """Grow SRAM to its full size, filling with 0xFF."""
        if len(self.sram) < SRAM_SIZE:
            self.sram.extend(b"\xff" * (SRAM_SIZE - len(self.sram)))

    def format_flash(self) -> None:
        """Grow flash RAM to its full size, filling with 0xFF."""
        if len(self.flash) < FLASHRAM_SIZE:
            self.flash.extend(b"\xff" * (FLASHRAM_SIZE - len(self.flash)))

    def read(self, address: int) -> int:
        """Read a 32-bit word from the save memory bus."""
        if self.uses_sram:
            return self._read_sram(address)
        return self._read_flash(address)

    def write(self, address: int, value: int, mask: int) -> None:
        """Write a masked 32-bit word to the save memory bus."""
        if self.uses_sram:
            self._write_sram(address, value, mask)
        else:
            self._write_flash(address, value, mask)

    def _read_sram(self, address: int) -> int:
        offset = address & SRAM_MASK
        self.format_sram()
        _check_range(self.sram, offset, 4)
        return int.from_bytes(self.sram[offset : offset + 4], "big")

    def _read_flash(self, address: int) -> int:
        if address & 0x1FFFF == 0:
            if self.flashram.mode is FlashramMode.STATUS:
                return self.flashram.status
            if self.flashram.mode is FlashramMode.READ_ARRAY:
                return 0
        raise FlashramError("unknown flashram read")

    def _write_sram(self, address: int, value: int, mask: int) -> None:
        offset = address & SRAM_MASK
        self.format_sram()
        _check_range(self.sram, offset, 4)
        data = int.from_bytes(self.sram[offset : offset + 4], "big")
        self.sram[offset : offset + 4] = masked_write(data, value, mask).to_bytes(4, "big")
        self.sram_dirty = True

    def _write_flash(self, address: int, value: int, mask: int) -> None:
        location = address & 0x1FFFF
        if location == 0 and self.flashram.mode is FlashramMode.STATUS:
            self.flashram.status = (value & mask) & 0xFF
        elif location == 0x10000:
            self.format_flash()
            self.command(value & mask)
        else:
            raise FlashramError("unknown flashram write")

    def dma_read(
        self, rdram: bytearray, cart_addr: int, dram_addr: int, length: int, byte_swap: int
    ) -> None:
        """Copy ``length`` bytes from RDRAM into the save memory."""
        if self.uses_sram:
            dram_addr &= len(rdram) - 1
            cart_addr &= SRAM_MASK
            self.format_sram()
            for k in range(length):
                self.sram[cart_addr + k] = rdram[(dram_addr + k) ^ byte_swap]
            self.sram_dirty = True
            return

        self.format_flash()
        if (
            cart_addr & 0x1FFFF == 0
            and length == PAGE_SIZE
            and self.flashram.mode is FlashramMode.PAGE_PROGRAM
        ):
            self.flashram.page_buf[:] = bytes(
                rdram[(dram_addr + k) ^ byte_swap] for k in range(length)
            )
        else:
            raise FlashramError("unknown flash dma read")

    def dma_write(
        self, rdram: bytearray, cart_addr: int, dram_addr: int, length: int, byte_swap: int
    ) -> None:
        """Copy ``length`` bytes from the save memory into RDRAM."""
        dram_addr &= len(rdram) - 1
        if self.uses_sram:
            cart_addr &= SRAM_MASK
            self.format_sram()
            for k in range(length):
                rdram[(dram_addr + k) ^ byte_swap] = self.sram[cart_addr + k]
            return

        mode = self.flashram.mode
        if cart_addr & 0x1FFFF == 0 and length == 8 and mode is FlashramMode.READ_SILICON_ID:
            order = "little" if byte_swap else "big"
            for position, word in enumerate(self.flashram.silicon_id):
                start = dram_addr + 4 * position
                rdram[start : start + 4] = word.to_bytes(4, order)
        elif cart_addr & 0x1FFFF < 0x10000 and mode is FlashramMode.READ_ARRAY:
            self.format_flash()
            if self.flashram.silicon_id[1] in _OLD_FLASH_IDS:
                cart_addr = (cart_addr & 0xFFFF) * 2
            else:
                cart_addr &= 0xFFFF
            for k in range(length):
                rdram[(dram_addr + k) ^ byte_swap] = self.flash[cart_addr + k]
        else:
            raise FlashramError("unknown flash dma write")

    def command(self, command: int) -> None:
        """Execute a flash command word."""
        chip = self.flashram
        opcode = command & 0xFF000000
        if opcode == 0x3C000000:
            chip.mode = FlashramMode.CHIP_ERASE
        elif opcode == 0x4B000000:
            chip.mode = FlashramMode.SECTOR_ERASE
            chip.erase_page = command & 0xFFFF
        elif opcode == 0x78000000:
            chip.status |= 0x02
            if chip.mode is FlashramMode.SECTOR_ERASE:
                offset = (chip.erase_page & 0xFF80) * PAGE_SIZE
                span = PAGE_SIZE * PAGE_SIZE
            elif chip.mode is FlashramMode.CHIP_ERASE:
                offset, span = 0, FLASHRAM_SIZE
            else:
                raise FlashramError("unexpected flash erase command")
            _check_range(self.flash, offset, span)
            self.flash[offset : offset + span] = b"\xff" * span
            self.flash_dirty = True
            chip.status &= ~0x02
            chip.status |= 0x08
            chip.mode = FlashramMode.STATUS
        elif opcode == 0xA5000000:
            chip.status |= 0x01
            offset = (command & 0xFFFF) * PAGE_SIZE
            _check_range(self.flash, offset, PAGE_SIZE)
            self.flash[offset : offset + PAGE_SIZE] = chip.page_buf
            self.flash_dirty = True
            chip.status &= ~0x01
            chip.status |= 0x04
            chip.mode = FlashramMode.STATUS
        elif opcode == 0xB4000000:
            chip.mode = FlashramMode.PAGE_PROGRAM
        elif opcode == 0xD2000000:
            chip.mode = FlashramMode.STATUS
        elif opcode == 0xE1000000:
            chip.mode = FlashramMode.READ_SILICON_ID
            chip.status |= 0x01
        elif opcode == 0xF0000000:
            chip.mode = FlashramMode.READ_ARRAY
        else:
            raise FlashramError(f"unknown flash command {command:#010x}")