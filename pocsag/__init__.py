"""
POCSAG - Text pager transmission encoder.
Builds POCSAG codeword sequences and renders them as baseband PCM audio.
"""

__version__ = "0.1.0"

# Reserved codewords
SYNC = 0x7CD215D8  # starts every batch
IDLE = 0x7A89C197  # padding and end of message

# Framing
FRAME_SIZE = 2  # words per frame
BATCH_SIZE = 16  # payload words per batch (8 frames)
PREAMBLE_LENGTH = 576  # bits of 1010... before the first batch
PREAMBLE_WORD = 0xAAAAAAAA

# First payload bit: 0 for address words, 1 for message words
FLAG_ADDRESS = 0x000000
FLAG_MESSAGE = 0x100000

# Low two bits of an address word's payload select the data type
FLAG_TEXT_DATA = 0x3

# Text packing
TEXT_BITS_PER_WORD = 20
TEXT_BITS_PER_CHAR = 7

# BCH(31,21) check bits
CRC_BITS = 10
CRC_GENERATOR = 0b11101101001

# Largest 21-bit address
MAX_ADDRESS = 0x1FFFFF

# Audio
SYMBOL_RATE = 38400  # internal rate before resampling
SAMPLE_RATE = 22050  # Hz (default)
BAUD_RATE = 512  # bits per second (default)
SYMBOL_LEVEL = 32767 // 2  # bit 0 -> +level, bit 1 -> -level

# Driver defaults
SILENCE_SECONDS = 1
MAX_SILENCE_SECONDS = 10
CARRIER_FREQUENCY = 439987500  # Hz, DAPNET UHF

from .codeword import crc, parity, encode_codeword, verify_codeword, split_codeword
from .transmission import (
    address_offset,
    encode_ascii,
    encode_transmission,
    text_message_length,
)
from .pcm import (
    PCMEncoder,
    ResourceExhaustedError,
    pcm_transmission_length,
    pcm_encode_transmission,
)
from .records import (
    PageRecord,
    RecordError,
    MalformedRecordError,
    AddressRangeError,
    parse_record,
    read_records,
)

__all__ = [
    "crc",
    "parity",
    "encode_codeword",
    "verify_codeword",
    "split_codeword",
    "address_offset",
    "encode_ascii",
    "encode_transmission",
    "text_message_length",
    "PCMEncoder",
    "ResourceExhaustedError",
    "pcm_transmission_length",
    "pcm_encode_transmission",
    "PageRecord",
    "RecordError",
    "MalformedRecordError",
    "AddressRangeError",
    "parse_record",
    "read_records",
]
