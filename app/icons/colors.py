"""Deterministic string -> color derivation for fallback glyphs."""


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_units(text: str) -> list[int]:
    data = text.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def derive_color(seed: str) -> str:
    """Hash a string into a six hex digit color (no leading '#').

    Rolling hash acc = unit + ((acc << 5) - acc) over UTF-16 code units, the
    shift done in 32-bit two's complement. Bytes are taken low byte first.
    Not cryptographic; the same seed always yields the same color and
    derive_color("") == "000000".
    """
    acc = 0
    for unit in _utf16_units(seed or ""):
        acc = unit + (_to_int32(_to_int32(acc) << 5) - acc)

    acc = _to_int32(acc)
    return "".join(f"{(acc >> (i * 8)) & 0xFF:02x}" for i in range(3))
