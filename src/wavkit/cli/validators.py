from wavkit.utils import UINT32_MAX

SUPPORTED_BIT_DEPTHS = (8, 16, 24, 32, 64)


def validate_bit_depth(type_: object, bits: int | None) -> None:
    """Validate that bits is a bit depth some sample format uses."""
    if bits is None:
        return

    if bits not in SUPPORTED_BIT_DEPTHS:
        raise ValueError(f"Bit depth must be one of {', '.join(map(str, SUPPORTED_BIT_DEPTHS))}")


def validate_timestamp(type_: object, timestamp: int | None) -> None:
    if timestamp is None:
        return

    if not 0 <= timestamp <= UINT32_MAX:
        raise ValueError("Timestamp must be between 0 and 4294967295")
