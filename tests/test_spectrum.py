import unittest

import numpy as np
import pytest

from tonal_beat.analysis.spectrum import SpectrumAnalyser

SAMPLE_RATE = 44100
FFT_SIZE = 2048


def bin_centred_sine(bin_index, amplitude=0.001, length=FFT_SIZE):
    frequency = bin_index * SAMPLE_RATE / FFT_SIZE
    t = np.arange(length) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * frequency * t)


@pytest.mark.parametrize("fft_size", [16, 1000, 65536])
def test_invalid_fft_size(fft_size):
    with pytest.raises(ValueError):
        SpectrumAnalyser(fft_size=fft_size)


class TestSpectrumAnalyser(unittest.TestCase):
    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            SpectrumAnalyser(smoothing_time_constant=1.5)
        with self.assertRaises(ValueError):
            SpectrumAnalyser(min_decibels=-30, max_decibels=-100)

    def test_silence_gives_zero_snapshot(self):
        analyser = SpectrumAnalyser()
        snapshot = analyser.snapshot(np.zeros(1024))
        self.assertEqual(snapshot.dtype, np.uint8)
        self.assertEqual(len(snapshot), analyser.frequency_bin_count)
        self.assertEqual(analyser.frequency_bin_count, 1024)
        self.assertFalse(snapshot.any())

    def test_sine_peaks_at_its_bin(self):
        analyser = SpectrumAnalyser(smoothing_time_constant=0.0)
        snapshot = analyser.snapshot(bin_centred_sine(100))
        self.assertEqual(int(np.argmax(snapshot)), 100)
        self.assertGreater(snapshot[100], 0)
        self.assertLess(snapshot[100], 255)

    def test_smoothing_ramps_up(self):
        analyser = SpectrumAnalyser(smoothing_time_constant=0.8)
        analyser.process(bin_centred_sine(100))
        first = int(analyser.get_byte_frequency_data()[100])
        analyser.get_byte_frequency_data()
        third = int(analyser.get_byte_frequency_data()[100])
        self.assertLess(first, third)

    def test_float_data_is_decibels(self):
        analyser = SpectrumAnalyser(smoothing_time_constant=0.0)
        analyser.process(bin_centred_sine(100, amplitude=0.5))
        decibels = analyser.get_float_frequency_data()
        self.assertEqual(len(decibels), 1024)
        # Blackman coherent gain 0.42, one-sided amplitude halved
        self.assertAlmostEqual(decibels[100], 20 * np.log10(0.5 * 0.42 / 2), delta=0.5)

    def test_uses_first_channel(self):
        analyser = SpectrumAnalyser()
        stereo = np.zeros((FFT_SIZE, 2))
        stereo[:, 1] = bin_centred_sine(100, amplitude=0.5)
        self.assertFalse(analyser.snapshot(stereo).any())

    def test_rolling_buffer_keeps_latest_samples(self):
        analyser = SpectrumAnalyser(smoothing_time_constant=0.0)
        analyser.process(bin_centred_sine(100))
        # A full buffer of silence pushes the sine out
        analyser.process(np.zeros(FFT_SIZE * 2))
        self.assertFalse(analyser.get_byte_frequency_data().any())

    def test_small_blocks_accumulate(self):
        analyser = SpectrumAnalyser(smoothing_time_constant=0.0)
        signal = bin_centred_sine(100)
        for start in range(0, FFT_SIZE, 256):
            analyser.process(signal[start : start + 256])
        self.assertEqual(int(np.argmax(analyser.get_byte_frequency_data())), 100)

    def test_reset(self):
        analyser = SpectrumAnalyser()
        analyser.snapshot(bin_centred_sine(100, amplitude=0.5))
        analyser.reset()
        self.assertFalse(analyser.get_byte_frequency_data().any())


if __name__ == "__main__":
    unittest.main()
