"""
Page driver - encodes a stream of pages and hands them to a transmitter.
"""

import logging
from typing import Iterable

import numpy as np

from . import (
    SAMPLE_RATE,
    BAUD_RATE,
    SILENCE_SECONDS,
    MAX_SILENCE_SECONDS,
    CARRIER_FREQUENCY,
)
from .pcm import PCMEncoder, pcm_transmission_length
from .records import PageRecord
from .transmission import encode_transmission, text_message_length
from .transmitter import Transmitter

_logger = logging.getLogger(__name__)


class PageDriver:
    """
    Encodes pages one at a time, in input order.

    Each page is rendered to audio, followed by a fixed block of silence,
    and the combined buffer is passed to the transmitter in one call.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        baud_rate: int = BAUD_RATE,
        silence_seconds: float = SILENCE_SECONDS,
        carrier_frequency: int = CARRIER_FREQUENCY,
        shape: bool = False,
    ):
        """
        Initialize driver.

        Args:
            sample_rate: Output audio sample rate (Hz)
            baud_rate: POCSAG bit rate (bits per second)
            silence_seconds: Silence after each page (seconds)
            carrier_frequency: Carrier to tune before each page (Hz)
            shape: Low-pass filter the baseband before sending
        """
        # The gap is fixed; randomised 1-10 s gaps are not implemented
        if not 0 <= silence_seconds <= MAX_SILENCE_SECONDS:
            raise ValueError(
                f"silence must be between 0 and {MAX_SILENCE_SECONDS} seconds"
            )

        self.encoder = PCMEncoder(sample_rate=sample_rate, baud_rate=baud_rate)
        self.silence_seconds = silence_seconds
        self.carrier_frequency = carrier_frequency
        self.shape = shape

    def render(self, record: PageRecord) -> np.ndarray:
        """
        Render one page plus its trailing silence.

        Args:
            record: Page to encode

        Returns:
            int16 samples
        """
        num_words = text_message_length(record.address, len(record.message))
        transmission = encode_transmission(record.address, record.message)
        if len(transmission) != num_words:
            raise RuntimeError(
                f"transmission is {len(transmission)} words, expected {num_words}"
            )

        samples = self.encoder.generate(transmission)
        if self.shape:
            samples = self.encoder.shape(samples)

        _logger.debug(
            f"Page to {record.address}: {num_words} words, "
            f"{pcm_transmission_length(self.encoder.sample_rate, self.encoder.baud_rate, num_words)} bytes"
        )

        return np.concatenate([samples, self.encoder.silence(self.silence_seconds)])

    def send(self, record: PageRecord, transmitter: Transmitter):
        """Render a page and transmit it."""
        samples = self.render(record)
        transmitter.set_carrier_frequency(self.carrier_frequency)
        transmitter.transmit_samples(samples)

    def run(self, records: Iterable[PageRecord], transmitter: Transmitter) -> int:
        """
        Send every record until the input is exhausted.

        Record errors raised while iterating propagate and stop processing.

        Returns:
            Number of pages sent
        """
        count = 0
        for record in records:
            self.send(record, transmitter)
            count += 1
            _logger.info(f"Sent page {count} to address {record.address}")
        return count
