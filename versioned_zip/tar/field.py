"""Tar header field decoding.

Every header field is a fixed-width byte window. Depending on the field it
is read as NUL-terminated text, a single byte or ASCII octal digits.
Decoded values are computed lazily and kept for the life of the field.
"""

from functools import cached_property

from ..exceptions import InvalidHeaderError

# Header text is single-byte; latin-1 maps every byte to one character
FIELD_ENCODING = "latin-1"

# Longest text shown by describe() before eliding
DESCRIBE_MAX_TEXT = 60


class HeaderField:
    """One named, fixed-width region of a tar header."""

    def __init__(self, name: str, raw: bytes):
        self.name = name
        self.raw = bytes(raw)

    def __len__(self) -> int:
        return len(self.raw)

    @property
    def as_byte(self) -> int:
        """First raw byte of the field (the type flag is one byte wide)."""
        return self.raw[0] if self.raw else 0

    @cached_property
    def as_string(self) -> str:
        """Bytes up to the first NUL, one character per byte."""
        end = self.raw.find(b"\x00")
        if end == -1:
            end = len(self.raw)
        return self.raw[:end].decode(FIELD_ENCODING)

    @cached_property
    def as_octal(self) -> int:
        """Parse the field as space/zero padded octal text.

        Leading spaces and zeros are padding. A NUL, or a space once digits
        have started, ends the number; only spaces and NULs may follow a
        terminating space. Anything else outside ``0``-``7`` is a decode
        error.
        """
        result = 0
        padding = True
        terminated = False
        for byte in self.raw:
            if terminated:
                if byte not in (0x00, 0x20):
                    raise InvalidHeaderError(
                        f"Octal? {self.describe(DESCRIBE_MAX_TEXT)}",
                        field_name=self.name,
                        raw=self.raw,
                    )
                continue
            if padding and byte in (0x20, 0x30):  # ' ', '0'
                continue
            if byte == 0:
                break
            if byte == 0x20:
                terminated = True
                continue
            if not 0x30 <= byte <= 0x37:
                raise InvalidHeaderError(
                    f"Octal? {self.describe(DESCRIBE_MAX_TEXT)}",
                    field_name=self.name,
                    raw=self.raw,
                )
            padding = False
            result = (result << 3) + (byte - 0x30)
        return result

    def describe(self, max_text: int = -1) -> str:
        """Render name, text and decimal byte values for diagnostics."""
        text = self.as_string
        if max_text < 0 or len(text) <= max_text:
            shown = f"'{text}'"
        else:
            shown = f"'{text[:max_text]}'..."
        values = ", ".join(str(b) for b in self.raw)
        return f"{self.name}: {shown}, or (dec) {values}"

    def __repr__(self) -> str:
        return f"HeaderField({self.describe(DESCRIBE_MAX_TEXT)})"
