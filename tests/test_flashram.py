import pytest

from n64emu.flashram import (
    FLASHRAM_SIZE,
    FLASHRAM_TYPE_ID,
    MX29L1100_ID,
    SRAM_SIZE,
    FlashramError,
    FlashramMode,
    SaveMemory,
    masked_write,
)

FULL = 0xFFFFFFFF
COMMAND = 0x10000


def flash_memory():
    return SaveMemory(uses_sram=False)


def test_format_sram_fills_with_ff():
    memory = SaveMemory()
    memory.format_sram()
    assert len(memory.sram) == SRAM_SIZE
    assert set(memory.sram) == {0xFF}


def test_format_keeps_existing_data():
    memory = SaveMemory(sram=bytearray(b"\x01\x02"))
    memory.format_sram()
    assert memory.sram[:2] == b"\x01\x02"
    assert len(memory.sram) == SRAM_SIZE


def test_sram_word_round_trip():
    memory = SaveMemory()
    memory.write(0x10, 0xAABBCCDD, FULL)
    assert memory.read(0x10) == 0xAABBCCDD
    assert memory.sram[0x10:0x14] == bytes.fromhex("aabbccdd")
    assert memory.sram_dirty


def test_masked_write_keeps_unselected_bits():
    assert masked_write(0x11223344, 0xFFFFFFFF, 0x0000FF00) == 0x1122FF44
    memory = SaveMemory()
    memory.write(0, 0x11223344, FULL)
    memory.write(0, 0xFFFFFFFF, 0x0000FF00)
    assert memory.read(0) == masked_write(0x11223344, 0xFFFFFFFF, 0x0000FF00)


def test_sram_access_beyond_size_raises():
    memory = SaveMemory()
    with pytest.raises(IndexError):
        memory.read(SRAM_SIZE)


def test_sram_dma_round_trip_with_byte_swap():
    source = bytearray(range(64))
    memory = SaveMemory()
    memory.dma_read(source, 0x100, 0, 16, 3)
    target = bytearray(64)
    memory.dma_write(target, 0x100, 0, 16, 3)
    assert target[:16] == source[:16]
    assert memory.sram_dirty


def test_sram_dma_without_swap_copies_in_order():
    source = bytearray(range(64))
    memory = SaveMemory()
    memory.dma_read(source, 0x100, 8, 8, 0)
    assert memory.sram[0x100:0x108] == source[8:16]


def test_page_program_writes_page():
    memory = flash_memory()
    memory.write(COMMAND, 0xB4000000, FULL)
    rdram = bytearray(range(256))
    memory.dma_read(rdram, 0, 0, 128, 0)
    memory.write(COMMAND, 0xA5000001, FULL)
    assert memory.flash[128:256] == rdram[:128]
    assert memory.flashram.mode is FlashramMode.STATUS
    assert memory.flashram.status & 0x04
    assert not memory.flashram.status & 0x01
    assert memory.flash_dirty
    assert memory.read(0) == memory.flashram.status


def test_chip_erase():
    memory = flash_memory()
    memory.flash = bytearray(FLASHRAM_SIZE)
    memory.write(COMMAND, 0x3C000000, FULL)
    memory.write(COMMAND, 0x78000000, FULL)
    assert set(memory.flash) == {0xFF}
    assert memory.flashram.status & 0x08
    assert memory.flashram.mode is FlashramMode.STATUS


def test_sector_erase_touches_one_sector():
    memory = flash_memory()
    memory.flash = bytearray(FLASHRAM_SIZE)
    memory.write(COMMAND, 0x4B000080, FULL)
    memory.write(COMMAND, 0x78000000, FULL)
    sector = 0x80 * 128
    assert set(memory.flash[sector : sector + 128 * 128]) == {0xFF}
    assert set(memory.flash[:sector]) == {0}
    assert set(memory.flash[sector + 128 * 128 :]) == {0}


def test_erase_without_mode_raises():
    memory = flash_memory()
    with pytest.raises(FlashramError):
        memory.write(COMMAND, 0x78000000, FULL)


def test_silicon_id_dma():
    memory = flash_memory()
    memory.write(COMMAND, 0xE1000000, FULL)
    rdram = bytearray(16)
    memory.dma_write(rdram, 0, 0, 8, 0)
    assert rdram[:4] == FLASHRAM_TYPE_ID.to_bytes(4, "big")
    assert rdram[4:8] == MX29L1100_ID.to_bytes(4, "big")
    assert memory.flashram.status & 0x01


def test_read_array_old_flash_doubles_address():
    memory = flash_memory()
    memory.format_flash()
    memory.flash[0x20:0x28] = b"abcdefgh"
    memory.write(COMMAND, 0xF0000000, FULL)
    rdram = bytearray(16)
    memory.dma_write(rdram, 0x10, 0, 8, 0)
    assert rdram[:8] == b"abcdefgh"


def test_read_array_new_flash_uses_address_directly():
    memory = flash_memory()
    memory.flashram.silicon_id = (FLASHRAM_TYPE_ID, MX29L1100_ID - 1)
    memory.format_flash()
    memory.flash[0x10:0x18] = b"abcdefgh"
    rdram = bytearray(16)
    memory.dma_write(rdram, 0x10, 0, 8, 0)
    assert rdram[:8] == b"abcdefgh"


def test_unknown_command_raises():
    memory = flash_memory()
    with pytest.raises(FlashramError):
        memory.write(COMMAND, 0x12000000, FULL)


def test_flash_reads():
    memory = flash_memory()
    assert memory.read(0) == 0
    with pytest.raises(FlashramError):
        memory.read(4)


def test_status_register_write():
    memory = flash_memory()
    memory.write(COMMAND, 0xD2000000, FULL)
    memory.write(0, 0x1234, FULL)
    assert memory.flashram.status == 0x34


def test_flash_dma_read_outside_page_program_raises():
    memory = flash_memory()
    with pytest.raises(FlashramError):
        memory.dma_read(bytearray(256), 0, 0, 128, 0)