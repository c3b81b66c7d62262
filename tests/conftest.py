"""
Shared fixtures, including a minimal POCSAG text decoder used to check
encoder output.
"""

import pytest

from pocsag import SYNC, IDLE, BATCH_SIZE
from pocsag.codeword import split_codeword, verify_codeword
from pocsag.transmission import PREAMBLE_WORDS


def decode_text_transmission(words):
    """
    Decode a single-page text transmission.

    Returns:
        (address, message bytes)
    """
    address = None
    data_bits = []
    position = 0

    body = words[PREAMBLE_WORDS:]
    assert body[0] == SYNC

    for word in body[1:]:
        if word == SYNC:
            assert position == BATCH_SIZE
            position = 0
            continue

        position += 1
        if word == IDLE:
            if address is not None:
                break
            continue

        assert verify_codeword(word)
        fields = split_codeword(word)
        if not fields.is_message:
            # Low 3 bits come from the frame the word sits in
            frame = (position - 1) // 2
            address = ((fields.message >> 2) << 3) | frame
            assert fields.message & 0x3 == 0x3
        else:
            for i in range(19, -1, -1):
                data_bits.append((fields.message >> i) & 1)

    chars = []
    for i in range(0, len(data_bits) - 6, 7):
        value = 0
        for j in range(7):
            # LSB first
            value |= data_bits[i + j] << j
        chars.append(value)

    return address, bytes(chars).rstrip(b"\x00")


@pytest.fixture
def decode():
    return decode_text_transmission
