from typing import NoReturn

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF


def assert_exhaustiveness(x: NoReturn) -> NoReturn:
    """Provide an assertion at type-check time that this function is never called."""
    raise AssertionError(f"Invalid value: {x!r}")


def fourcc_repr(four_cc: bytes) -> str:
    """Render a chunk identifier for messages, keeping trailing spaces visible."""
    return repr(four_cc.decode("latin-1"))
