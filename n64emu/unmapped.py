"""Bus behaviour for addresses that no device claims."""


def read_mem(address: int) -> int:
    """Return the open-bus value: the low address half repeated in both halves."""
    value = address & 0xFFFF
    return value | (value << 16)


def write_mem(address: int, value: int, mask: int) -> None:
    """Discard a write to unmapped space; negative operands are rejected."""
    for name, operand in (("address", address), ("value", value), ("mask", mask)):
        if operand < 0:
            raise ValueError(f"{name} must not be negative: {operand}")