"""
PCM synthesis - renders POCSAG words as a two-level baseband waveform.

Bits are first laid out at a fixed internal symbol rate, then resampled
to the output rate by nearest-neighbour selection. Output samples are
16-bit signed, little-endian.
"""

import logging
from typing import Optional, Sequence

import numpy as np
from scipy import signal

from . import SAMPLE_RATE, BAUD_RATE, SYMBOL_RATE, SYMBOL_LEVEL

_logger = logging.getLogger(__name__)


class ResourceExhaustedError(RuntimeError):
    """Raised when a sample buffer cannot be allocated."""


def pcm_transmission_length(
    sample_rate: int,
    baud_rate: int,
    transmission_length: int,
) -> int:
    """
    Size in bytes of the PCM rendering of a transmission.

    32 bits per word at sample_rate / baud_rate samples per bit, two
    bytes per sample.
    """
    return transmission_length * 32 * sample_rate // baud_rate * 2


class PCMEncoder:
    """
    Baseband encoder for POCSAG transmissions.

    Bit 0 maps to +SYMBOL_LEVEL and bit 1 to -SYMBOL_LEVEL, which a
    transmitter's FM modulator turns into the two FSK tones.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        baud_rate: int = BAUD_RATE,
        symbol_rate: int = SYMBOL_RATE,
    ):
        """
        Initialize encoder.

        Args:
            sample_rate: Output audio sample rate (Hz)
            baud_rate: Bit rate (bits per second)
            symbol_rate: Internal rate bits are stretched to before resampling
        """
        if sample_rate <= 0 or baud_rate <= 0 or symbol_rate <= 0:
            raise ValueError("rates must be positive")
        if baud_rate > symbol_rate:
            raise ValueError(
                f"baud rate {baud_rate} exceeds symbol rate {symbol_rate}"
            )

        self.sample_rate = sample_rate
        self.baud_rate = baud_rate
        self.symbol_rate = symbol_rate

        # Times each bit is repeated at the symbol rate
        self.repeats_per_symbol = symbol_rate // baud_rate

    def output_length(self, transmission_length: int) -> int:
        """Number of output samples for a transmission of the given length."""
        return pcm_transmission_length(
            self.sample_rate, self.baud_rate, transmission_length
        ) // 2

    def _symbols(self, transmission: Sequence[int]) -> np.ndarray:
        """Lay the transmission out at the symbol rate."""
        words = np.asarray(transmission, dtype=np.uint32)

        # MSB first
        shifts = np.arange(31, -1, -1, dtype=np.uint32)
        bits = (words[:, np.newaxis] >> shifts) & 1

        levels = np.where(bits.ravel() == 0, SYMBOL_LEVEL, -SYMBOL_LEVEL).astype(np.int16)
        return np.repeat(levels, self.repeats_per_symbol)

    def _resample(self, symbols: np.ndarray, num_samples: int) -> np.ndarray:
        """Nearest-neighbour resampling from the symbol rate to the sample rate."""
        if num_samples == 0 or len(symbols) == 0:
            return np.zeros(0, dtype=np.int16)

        index = np.arange(num_samples, dtype=np.int64) * self.symbol_rate // self.sample_rate
        # Only reachable when the baud rate does not divide the symbol rate
        np.minimum(index, len(symbols) - 1, out=index)
        return symbols[index]

    def generate(self, transmission: Sequence[int]) -> np.ndarray:
        """
        Render a transmission to audio samples.

        Args:
            transmission: 32-bit POCSAG words

        Returns:
            int16 array of output samples
        """
        num_samples = self.output_length(len(transmission))
        try:
            symbols = self._symbols(transmission)
            samples = self._resample(symbols, num_samples)
        except MemoryError as e:
            raise ResourceExhaustedError(
                f"cannot allocate {num_samples} samples for "
                f"{len(transmission)} words"
            ) from e

        _logger.debug(
            f"Rendered {len(transmission)} words: {len(symbols)} symbols -> "
            f"{len(samples)} samples at {self.sample_rate} Hz"
        )
        return samples

    def silence(self, seconds: float) -> np.ndarray:
        """Zero-valued samples for the given duration."""
        try:
            return np.zeros(int(self.sample_rate * seconds), dtype=np.int16)
        except MemoryError as e:
            raise ResourceExhaustedError(f"cannot allocate {seconds}s of silence") from e

    def shape(self, samples: np.ndarray, cutoff_hz: Optional[float] = None) -> np.ndarray:
        """
        Low-pass the square baseband to limit the transmitted bandwidth.

        Zero-crossing positions are preserved and the original peak level
        is restored after filtering.

        Args:
            samples: int16 samples from generate()
            cutoff_hz: Filter cutoff (default: the baud rate)

        Returns:
            Filtered int16 samples
        """
        if cutoff_hz is None:
            cutoff_hz = self.baud_rate

        nyquist = self.sample_rate / 2
        cutoff = min(cutoff_hz / nyquist, 0.99)
        b, a = signal.butter(4, cutoff, btype='low')

        # filtfilt needs more samples than its padding length
        if len(samples) <= 3 * max(len(a), len(b)):
            return samples

        smoothed = signal.filtfilt(b, a, samples.astype(np.float64))

        max_orig = np.max(np.abs(samples))
        max_smoothed = np.max(np.abs(smoothed))
        if max_smoothed > 0:
            smoothed = smoothed * (max_orig / max_smoothed)

        return np.round(smoothed).astype(np.int16)

    @staticmethod
    def to_bytes(samples: np.ndarray) -> bytes:
        """Serialize samples as little-endian 16-bit PCM."""
        return samples.astype('<i2').tobytes()

    def encode(self, transmission: Sequence[int]) -> bytes:
        """Render a transmission straight to little-endian PCM bytes."""
        return self.to_bytes(self.generate(transmission))


def pcm_encode_transmission(
    sample_rate: int,
    baud_rate: int,
    transmission: Sequence[int],
) -> bytes:
    """
    Render a transmission as little-endian 16-bit PCM bytes.

    The result is exactly pcm_transmission_length(sample_rate, baud_rate,
    len(transmission)) bytes long.
    """
    return PCMEncoder(sample_rate, baud_rate).encode(transmission)
