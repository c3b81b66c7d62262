"""
Tests for PCM synthesis.
"""

import numpy as np
import pytest

from pocsag import (
    SYMBOL_RATE,
    SYMBOL_LEVEL,
    PCMEncoder,
    ResourceExhaustedError,
    encode_transmission,
    pcm_encode_transmission,
    pcm_transmission_length,
    text_message_length,
)

RATES = [
    (22050, 512),
    (22050, 1200),
    (22050, 2400),
    (48000, 1200),
    (44100, 2400),
    (8000, 512),
    (38400, 1200),
    (96000, 512),
]


class TestPCMLength:
    def test_reference_length(self):
        # 35 words * 32 bits * 22050 / 512, two bytes each
        assert pcm_transmission_length(22050, 512, 35) == 48234 * 2

    def test_zero_words(self):
        assert pcm_transmission_length(22050, 512, 0) == 0

    @pytest.mark.parametrize("sample_rate,baud_rate", RATES)
    def test_matches_encoder(self, sample_rate, baud_rate):
        for address, message in [(0, ""), (7, "A"), (1234567, "length check " * 5)]:
            words = encode_transmission(address, message)
            n = text_message_length(address, len(message))
            pcm = pcm_encode_transmission(sample_rate, baud_rate, words)
            assert len(pcm) == pcm_transmission_length(sample_rate, baud_rate, n)

    def test_non_divisor_baud_rate(self):
        words = encode_transmission(3, "odd rate")
        pcm = pcm_encode_transmission(22050, 500, words)
        assert len(pcm) == pcm_transmission_length(22050, 500, len(words))


class TestPCMEncoder:
    """Test baseband rendering."""

    def test_encoder_init(self):
        encoder = PCMEncoder()
        assert encoder.sample_rate == 22050
        assert encoder.baud_rate == 512
        assert encoder.symbol_rate == SYMBOL_RATE
        assert encoder.repeats_per_symbol == 75

    def test_encoder_custom_params(self):
        encoder = PCMEncoder(sample_rate=48000, baud_rate=1200)
        assert encoder.sample_rate == 48000
        assert encoder.baud_rate == 1200
        assert encoder.repeats_per_symbol == 32

    def test_invalid_rates(self):
        with pytest.raises(ValueError):
            PCMEncoder(sample_rate=0)
        with pytest.raises(ValueError):
            PCMEncoder(baud_rate=0)
        with pytest.raises(ValueError):
            PCMEncoder(baud_rate=SYMBOL_RATE * 2)

    def test_levels(self):
        encoder = PCMEncoder(sample_rate=1200, baud_rate=1200)
        samples = encoder.generate([0xF0000000])
        assert samples.dtype == np.int16
        assert len(samples) == 32
        assert list(samples[:4]) == [-SYMBOL_LEVEL] * 4
        assert list(samples[4:]) == [SYMBOL_LEVEL] * 28

    def test_symbol_rate_output_repeats_each_bit(self):
        encoder = PCMEncoder(sample_rate=SYMBOL_RATE, baud_rate=1200)
        word = 0x8000000F
        samples = encoder.generate([word])

        repeats = encoder.repeats_per_symbol
        assert len(samples) == 32 * repeats
        for bit_num in range(32):
            bit = (word >> (31 - bit_num)) & 1
            chunk = samples[bit_num * repeats:(bit_num + 1) * repeats]
            expected = -SYMBOL_LEVEL if bit else SYMBOL_LEVEL
            assert np.all(chunk == expected)

    def test_nearest_neighbour_resampling(self):
        encoder = PCMEncoder(sample_rate=22050, baud_rate=512)
        words = encode_transmission(1, "resample")
        samples = encoder.generate(words)
        symbols = encoder._symbols(words)

        index = np.arange(len(samples)) * SYMBOL_RATE // 22050
        assert np.array_equal(samples, symbols[index])

    def test_little_endian_bytes(self):
        encoder = PCMEncoder(sample_rate=1200, baud_rate=1200)
        pcm = encoder.encode([0xAAAAAAAA])
        # Bit 1 -> -16383 (0xC001), bit 0 -> 16383 (0x3FFF)
        assert pcm[:4] == b"\x01\xc0\xff\x3f"
        assert len(pcm) == 64

    def test_empty_transmission(self):
        encoder = PCMEncoder()
        assert len(encoder.generate([])) == 0
        assert encoder.encode([]) == b""

    def test_silence(self):
        encoder = PCMEncoder(sample_rate=22050)
        silence = encoder.silence(1)
        assert len(silence) == 22050
        assert silence.dtype == np.int16
        assert not np.any(silence)

    def test_shape(self):
        encoder = PCMEncoder()
        samples = encoder.generate(encode_transmission(0, "shape"))
        shaped = encoder.shape(samples)

        assert shaped.dtype == np.int16
        assert len(shaped) == len(samples)
        assert np.max(np.abs(shaped)) == np.max(np.abs(samples))
        # Sign mostly preserved away from transitions
        assert np.mean(np.sign(shaped) == np.sign(samples)) > 0.9

    def test_shape_short_input(self):
        encoder = PCMEncoder()
        samples = np.array([SYMBOL_LEVEL, -SYMBOL_LEVEL], dtype=np.int16)
        assert np.array_equal(encoder.shape(samples), samples)

    def test_memory_error(self, monkeypatch):
        encoder = PCMEncoder()

        def fail(*args, **kwargs):
            raise MemoryError()

        monkeypatch.setattr(np, "repeat", fail)
        with pytest.raises(ResourceExhaustedError):
            encoder.generate([0])
