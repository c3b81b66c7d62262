"""
Transmitter backends.

The driver hands each finished sample buffer to a Transmitter. Software
backends write the samples to a stream, an audio file, or a sound card
wired to a radio's baseband input.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np
import soundfile as sf

from .pcm import PCMEncoder

_logger = logging.getLogger(__name__)


class Transmitter(ABC):
    """Sink for rendered transmissions."""

    def __init__(self):
        self.carrier_frequency: Optional[int] = None

    def set_carrier_frequency(self, hz: int):
        """Tune the carrier. Backends without a radio just record it."""
        if hz <= 0:
            raise ValueError("carrier frequency must be positive")
        self.carrier_frequency = hz
        _logger.debug(f"Carrier frequency set to {hz} Hz")

    @abstractmethod
    def transmit_samples(self, samples: np.ndarray):
        """Send one buffer of int16 samples."""

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class StreamTransmitter(Transmitter):
    """Writes raw little-endian 16-bit PCM to a binary stream."""

    def __init__(self, stream: BinaryIO, close_stream: bool = False):
        super().__init__()
        self.stream = stream
        self.close_stream = close_stream

    def transmit_samples(self, samples: np.ndarray):
        self.stream.write(PCMEncoder.to_bytes(samples))
        self.stream.flush()

    def close(self):
        if self.close_stream:
            self.stream.close()


class WaveFileTransmitter(Transmitter):
    """
    Writes mono 16-bit audio to a file via soundfile.

    The container is taken from the file extension unless format is given
    (e.g. "WAV", "FLAC").
    """

    def __init__(
        self,
        output_path: Union[str, Path],
        sample_rate: int,
        format: Optional[str] = None,
    ):
        super().__init__()
        self.output_path = str(output_path)
        self._file = sf.SoundFile(
            self.output_path,
            mode='w',
            samplerate=sample_rate,
            channels=1,
            subtype='PCM_16',
            format=format,
        )

    def transmit_samples(self, samples: np.ndarray):
        self._file.write(samples)

    def close(self):
        if not self._file.closed:
            self._file.close()
            _logger.info(f"Wrote {self.output_path}")


class AudioDeviceTransmitter(Transmitter):
    """
    Plays samples on a sound device, for radios keyed from an audio input.

    Playback blocks until each buffer has been sent.
    """

    def __init__(self, sample_rate: int, device: Optional[int] = None):
        super().__init__()
        self.sample_rate = sample_rate
        self.device = device

    def set_carrier_frequency(self, hz: int):
        super().set_carrier_frequency(hz)
        _logger.info(f"Tune transmitter to {hz / 1e6:.4f} MHz")

    def transmit_samples(self, samples: np.ndarray):
        import sounddevice as sd

        sd.play(samples, self.sample_rate, device=self.device, blocking=True)
