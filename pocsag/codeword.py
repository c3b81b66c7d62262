"""
POCSAG codeword construction: BCH(31,21) check bits and even parity.
"""

from typing import NamedTuple

from . import CRC_BITS, CRC_GENERATOR


class BCHCode:
    """
    BCH(31,21) check code used by POCSAG codewords.
    Generator: x^10 + x^9 + x^8 + x^6 + x^5 + x^3 + 1 (0b11101101001)

    The 10 check bits are the remainder of a binary polynomial long
    division of the 21-bit message (right-padded with 10 zero bits)
    by the generator.
    """

    GENERATOR = CRC_GENERATOR
    MESSAGE_BITS = 21
    CHECK_BITS = CRC_BITS

    @classmethod
    def compute(cls, message: int) -> int:
        """Compute the 10-bit check code for a 21-bit message."""
        # Message is right-padded with zeroes for the check bits
        return cls.remainder((message & 0x1FFFFF) << cls.CHECK_BITS)

    @classmethod
    def remainder(cls, value: int) -> int:
        """Divide a full 31-bit message+check value, returning the remainder."""
        # Align MSB of the generator with MSB of the value
        denominator = cls.GENERATOR << (cls.MESSAGE_BITS - 1)
        msg = value & 0x7FFFFFFF

        for column in range(cls.MESSAGE_BITS):
            # XOR stands in for subtraction
            if (msg >> (30 - column)) & 1:
                msg ^= denominator
            denominator >>= 1

        return msg & 0x3FF

    @classmethod
    def verify(cls, message: int, check: int) -> bool:
        """Verify a 21-bit message against its check code."""
        return cls.compute(message) == check


class CodewordFields(NamedTuple):
    """A 32-bit codeword split into its fields."""

    message: int  # bits 31..11, flag bit included
    crc: int  # bits 10..1
    parity: int  # bit 0

    @property
    def is_message(self) -> bool:
        return bool(self.message & 0x100000)


def crc(message: int) -> int:
    """
    Calculate the CRC error checking code for a 21-bit message.
    See https://en.wikipedia.org/wiki/Cyclic_redundancy_check#Computation
    """
    return BCHCode.compute(message)


def parity(x: int) -> int:
    """Even parity bit over 32 bits: 1 if the number of set bits is odd."""
    p = 0
    for _ in range(32):
        p ^= x & 1
        x >>= 1
    return p


def encode_codeword(message: int) -> int:
    """
    Encode a 21-bit message by appending its CRC code and parity bit.

    Args:
        message: 21-bit payload (flag bit + 20 data bits)

    Returns:
        32-bit codeword
    """
    if not 0 <= message <= 0x1FFFFF:
        raise ValueError("message must be 21-bit unsigned")

    full_crc = (message << CRC_BITS) | crc(message)
    return (full_crc << 1) | parity(full_crc)


def split_codeword(codeword: int) -> CodewordFields:
    """Split a 32-bit codeword into message, CRC and parity fields."""
    return CodewordFields(
        message=(codeword >> 11) & 0x1FFFFF,
        crc=(codeword >> 1) & 0x3FF,
        parity=codeword & 1,
    )


def verify_codeword(codeword: int) -> bool:
    """
    Check a codeword's CRC and even parity.

    IDLE passes this check even though it carries no payload.
    """
    fields = split_codeword(codeword)
    if not BCHCode.verify(fields.message, fields.crc):
        return False
    return parity(codeword & 0xFFFFFFFF) == 0
