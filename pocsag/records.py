"""
Input records: one page per line, "<address>:<message>".
"""

from typing import BinaryIO, Iterator, NamedTuple

from . import MAX_ADDRESS


class RecordError(ValueError):
    """Base class for bad input records."""

    def __init__(self, message: str, line_number: int = 0):
        super().__init__(message)
        self.line_number = line_number

    def __str__(self) -> str:
        text = super().__str__()
        if self.line_number:
            return f"line {self.line_number}: {text}"
        return text


class MalformedRecordError(RecordError):
    """Line has no ':' delimiter or a non-numeric address."""


class AddressRangeError(RecordError):
    """Address does not fit in 21 bits."""


class PageRecord(NamedTuple):
    """A single page to transmit."""

    address: int
    message: bytes


def parse_record(line: bytes, line_number: int = 0) -> PageRecord:
    """
    Parse one input line.

    The message is everything after the first colon, so it may itself
    contain colons. Trailing line endings must already be stripped.

    Args:
        line: Raw line without its line ending
        line_number: Position in the input, for error messages

    Returns:
        PageRecord

    Raises:
        MalformedRecordError: No delimiter, or the address is not plain decimal digits
        AddressRangeError: Address above 2097151
    """
    if isinstance(line, str):
        line = line.encode("utf-8")

    address_text, sep, message = line.partition(b":")
    if not sep:
        raise MalformedRecordError("Malformed Line!", line_number)

    # Plain decimal digits only: no sign, no underscores
    address_text = address_text.strip()
    if not address_text.isdigit():
        raise MalformedRecordError(
            f"address is not a decimal integer: {address_text!r}", line_number
        )

    address = int(address_text)
    if address > MAX_ADDRESS:
        raise AddressRangeError(f"Address exceeds 21 bits: {address}", line_number)

    return PageRecord(address, message)


def read_records(stream: BinaryIO) -> Iterator[PageRecord]:
    """
    Yield records from a binary stream until end of input.

    A trailing \\n and then a trailing \\r are stripped from each line;
    lines left empty are skipped.
    """
    for line_number, line in enumerate(stream, start=1):
        if line.endswith(b"\n"):
            line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        if not line:
            continue
        yield parse_record(line, line_number)
