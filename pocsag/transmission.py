"""
POCSAG transmission assembly: text packing, batch framing and length calculation.

Transmission layout (one word = 32 bits, MSB first):
- Preamble: 18 words of 0xAAAAAAAA (576 bits)
- Batches: SYNC + 16 payload words, repeated

The address word sits at batch position (address & 7) * 2; the words in
front of it are IDLE. Message words follow, then one IDLE marking the end
of the message, then IDLE padding out the final batch.
"""

from typing import List, Union

from . import (
    SYNC,
    IDLE,
    FRAME_SIZE,
    BATCH_SIZE,
    PREAMBLE_LENGTH,
    PREAMBLE_WORD,
    FLAG_MESSAGE,
    FLAG_TEXT_DATA,
    TEXT_BITS_PER_WORD,
    TEXT_BITS_PER_CHAR,
    MAX_ADDRESS,
)
from .codeword import encode_codeword

PREAMBLE_WORDS = PREAMBLE_LENGTH // 32

Text = Union[str, bytes]


def _as_bytes(text: Text) -> bytes:
    # Only the low 7 bits of each byte are transmitted
    if isinstance(text, str):
        return text.encode("utf-8")
    return bytes(text)


def _check_address(address: int):
    if not 0 <= address <= MAX_ADDRESS:
        raise ValueError(f"address must be 21-bit unsigned, got {address}")


def address_offset(address: int) -> int:
    """
    Number of words preceding the address word within its batch.

    Only 18 of the 21 address bits are carried in the address word; the
    low 3 bits select the frame the word is placed in.
    """
    return (address & 0x7) * FRAME_SIZE


def encode_ascii(initial_offset: int, text: Text, out: List[int]) -> int:
    """
    Pack a string into message codewords, appending them to out.

    Characters are 7 bits wide and written LSB first; they are split
    across words so every one of a word's 20 data bits is used. A SYNC
    word is inserted whenever a batch fills up.

    Args:
        initial_offset: Batch position of the first word written (0-15)
        text: Message text
        out: Destination list

    Returns:
        Number of words appended, SYNC words included
    """
    num_words_written = 0
    current_word = 0
    current_num_bits = 0
    word_position = initial_offset

    def flush():
        nonlocal num_words_written, current_word, current_num_bits, word_position
        out.append(encode_codeword(current_word | FLAG_MESSAGE))
        current_word = 0
        current_num_bits = 0
        num_words_written += 1

        word_position += 1
        if word_position == BATCH_SIZE:
            # Batch full, start the next one
            out.append(SYNC)
            num_words_written += 1
            word_position = 0

    for c in _as_bytes(text):
        for i in range(TEXT_BITS_PER_CHAR):
            current_word = (current_word << 1) | ((c >> i) & 1)
            current_num_bits += 1
            if current_num_bits == TEXT_BITS_PER_WORD:
                flush()

    if current_num_bits > 0:
        # Zero-pad the remainder to a full word
        current_word <<= TEXT_BITS_PER_WORD - current_num_bits
        flush()

    return num_words_written


def encode_transmission(address: int, message: Text) -> List[int]:
    """
    Encode a full text POCSAG transmission.

    Args:
        address: 21-bit pager address
        message: Message text

    Returns:
        List of 32-bit words, preamble included
    """
    _check_address(address)

    out = [PREAMBLE_WORD] * PREAMBLE_WORDS
    start = len(out)

    out.append(SYNC)

    prefix_length = address_offset(address)
    out.extend([IDLE] * prefix_length)

    # Low 2 payload bits carry the data type
    out.append(encode_codeword(((address >> 3) << 2) | FLAG_TEXT_DATA))

    encode_ascii(prefix_length + 1, message, out)

    # End of message
    out.append(IDLE)

    # Pad to a whole number of batches (16 words + SYNC)
    written = len(out) - start
    padding = (BATCH_SIZE + 1) - written % (BATCH_SIZE + 1)
    if padding == BATCH_SIZE + 1:
        # Last batch is already full; the extra padding batch needs its SYNC
        out.append(SYNC)
        padding = BATCH_SIZE
    out.extend([IDLE] * padding)

    return out


def text_message_length(address: int, num_chars: int) -> int:
    """
    Length in words of a text transmission, without building it.

    Args:
        address: 21-bit pager address
        num_chars: Message length in bytes

    Returns:
        Word count, preamble included
    """
    _check_address(address)
    if num_chars < 0:
        raise ValueError("num_chars must be non-negative")

    num_words = address_offset(address)

    # Address word
    num_words += 1

    # 7 bits per character, 20 bits per word, rounded up
    num_words += (num_chars * TEXT_BITS_PER_CHAR + (TEXT_BITS_PER_WORD - 1)) // TEXT_BITS_PER_WORD

    # End of message
    num_words += 1

    # Pad the last batch; a full batch is followed by one more batch of padding
    num_words += BATCH_SIZE - (num_words % BATCH_SIZE)

    # One SYNC per batch
    num_words += num_words // BATCH_SIZE

    # Preamble goes first but does not take part in batch arithmetic
    num_words += PREAMBLE_WORDS

    return num_words
