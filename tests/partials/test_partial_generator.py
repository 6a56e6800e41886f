# test_partial_generator.py
"""
Test suite per PartialGenerator.

Organizzazione:
1. Costruzione diretta
2. Costruzione da envelope
3. render_audio() - lunghezza, determinismo, dtype
4. render_audio() - oscillatore custom e contratto
5. render_audio() - parallelismo (per paxel e tra generatori)
"""

import threading
import pytest
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

from paxels.paxel_specification import PartialSpecification
from partials.envelope_mapper import EnvelopeGridMapper
from partials.partial_generator import PartialGenerator
from partials.render_config import DEFAULT_RENDER_CONFIG, RenderConfig
from rendering.paxel_oscillator import render_paxel


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def generator_from_envelopes(envelopes_1000):
    return PartialGenerator.from_envelopes(
        envelopes_1000, {'fundamental', 'voice-1'}, 256, 50
    )


# =============================================================================
# 1. COSTRUZIONE DIRETTA
# =============================================================================

class TestDirectConstruction:

    def test_stores_specification_verbatim(self, three_paxel_specification):
        gen = PartialGenerator(three_paxel_specification, {'a'})
        assert gen.get_partial_specification() is three_paxel_specification

    def test_labels_frozen(self, three_paxel_specification):
        labels = {'a', 'b'}
        gen = PartialGenerator(three_paxel_specification, labels)
        labels.add('c')
        assert gen.get_labels() == frozenset({'a', 'b'})
        assert isinstance(gen.get_labels(), frozenset)

    def test_labels_from_any_iterable(self, three_paxel_specification):
        gen = PartialGenerator(three_paxel_specification, ['x', 'y', 'x'])
        assert gen.get_labels() == frozenset({'x', 'y'})

    def test_empty_labels(self, three_paxel_specification):
        assert PartialGenerator(three_paxel_specification, set()).get_labels() == frozenset()

    def test_bare_string_labels_rejected(self, three_paxel_specification):
        with pytest.raises(TypeError):
            PartialGenerator(three_paxel_specification, 'fundamental')

    def test_defaults(self, three_paxel_specification):
        gen = PartialGenerator(three_paxel_specification, set())
        assert gen.config is DEFAULT_RENDER_CONFIG
        assert gen.oscillator is render_paxel

    def test_accessors_stable(self, three_paxel_specification):
        gen = PartialGenerator(three_paxel_specification, {'a'})
        assert gen.get_partial_specification() == gen.get_partial_specification()
        assert gen.get_labels() is gen.get_labels()

    def test_repr(self, three_paxel_specification):
        text = repr(PartialGenerator(three_paxel_specification, {'b', 'a'}))
        assert 'paxels=3' in text
        assert 'samples=175' in text


# =============================================================================
# 2. COSTRUZIONE DA ENVELOPE
# =============================================================================

class TestEnvelopeConstruction:

    def test_matches_mapper(self, envelopes_1000, generator_from_envelopes):
        expected = EnvelopeGridMapper(256, 50).map(envelopes_1000)
        assert generator_from_envelopes.get_partial_specification() == expected

    def test_labels(self, generator_from_envelopes):
        assert generator_from_envelopes.get_labels() == frozenset({'fundamental', 'voice-1'})

    def test_scenario_a(self, envelopes_1000):
        gen = PartialGenerator.from_envelopes(envelopes_1000, set(), 256, 0)
        spec = gen.get_partial_specification()
        assert [p.duration_samples for p in spec] == [256, 256, 256, 232]

    def test_config_propagated(self, envelopes_constant):
        config = RenderConfig(sample_rate=96000, sample_dtype='int16')
        gen = PartialGenerator.from_envelopes(envelopes_constant, set(), 24, config=config)
        assert gen.config is config
        assert gen.get_partial_specification()[0].end_phase == pytest.approx(0.25)
        assert gen.render_audio().dtype == np.int16

    def test_invalid_grid_raises(self, envelopes_1000):
        with pytest.raises(ValueError):
            PartialGenerator.from_envelopes(envelopes_1000, set(), 0, 0)
        with pytest.raises(ValueError):
            PartialGenerator.from_envelopes(envelopes_1000, set(), 256, 256)


# =============================================================================
# 3. RENDER AUDIO
# =============================================================================

class TestRenderAudio:

    def test_duration_conservation(self, generator_from_envelopes):
        spec = generator_from_envelopes.get_partial_specification()
        audio = generator_from_envelopes.render_audio()
        assert len(audio) == sum(p.duration_samples for p in spec) == 1000

    def test_dtype(self, generator_from_envelopes):
        assert generator_from_envelopes.render_audio().dtype == np.int32

    def test_deterministic(self, generator_from_envelopes):
        first = generator_from_envelopes.render_audio()
        second = generator_from_envelopes.render_audio()
        np.testing.assert_array_equal(first, second)

    def test_concatenates_paxels_in_order(self, three_paxel_specification):
        gen = PartialGenerator(three_paxel_specification, set())
        audio = gen.render_audio()
        expected = np.concatenate([render_paxel(p) for p in three_paxel_specification])
        np.testing.assert_array_equal(audio, expected)

    def test_empty_specification(self):
        gen = PartialGenerator(PartialSpecification(), set())
        audio = gen.render_audio()
        assert len(audio) == 0
        assert audio.dtype == np.int32

    def test_silent_envelope_renders_zeros(self):
        from envelopes.envelope import PartialEnvelopes
        env = PartialEnvelopes.from_breakpoints([[0, 440.0]], [[0, 0.0]], duration_samples=500)
        audio = PartialGenerator.from_envelopes(env, set(), 128).render_audio()
        assert not np.any(audio)

    def test_no_clicks_at_boundaries(self, envelopes_constant):
        """Tra paxel adiacenti il salto non supera quello interno alla sinusoide."""
        gen = PartialGenerator.from_envelopes(envelopes_constant, set(), 100, 37)
        audio = gen.render_audio().astype(np.float64)
        max_step = np.max(np.abs(np.diff(audio)))
        # 1000 Hz @ 48 kHz, ampiezza 0.5: passo massimo ≈ 0.5 * 2π * 1000/48000 * full scale
        bound = 0.5 * 2 * np.pi * 1000 / 48000 * gen.config.full_scale
        assert max_step <= bound * 1.01
        for b in gen.get_partial_specification().boundaries[1:-1]:
            assert abs(audio[b] - audio[b - 1]) <= bound * 1.01


# =============================================================================
# 4. OSCILLATORE CUSTOM
# =============================================================================

class TestCustomOscillator:

    def test_oscillator_called_per_paxel_in_order(self, three_paxel_specification):
        calls = []

        def fake_oscillator(paxel, config):
            calls.append(paxel.start_sample)
            return np.full(paxel.duration_samples, paxel.start_sample, dtype=np.int32)

        gen = PartialGenerator(three_paxel_specification, set(), oscillator=fake_oscillator)
        audio = gen.render_audio()

        assert calls == [0, 100, 150]
        assert audio[0] == 0 and audio[100] == 100 and audio[-1] == 150

    def test_config_passed_to_oscillator(self, three_paxel_specification, render_config):
        oscillator = MagicMock(side_effect=lambda p, c: np.zeros(p.duration_samples))
        gen = PartialGenerator(three_paxel_specification, set(), render_config, oscillator)
        gen.render_audio()
        for call in oscillator.call_args_list:
            assert call.args[1] is render_config

    def test_output_cast_to_sample_dtype(self, three_paxel_specification):
        gen = PartialGenerator(
            three_paxel_specification, set(),
            oscillator=lambda p, c: np.zeros(p.duration_samples, dtype=np.float64),
        )
        assert gen.render_audio().dtype == np.int32

    def test_wrong_length_raises(self, three_paxel_specification):
        gen = PartialGenerator(
            three_paxel_specification, set(),
            oscillator=lambda p, c: np.zeros(p.duration_samples + 1),
        )
        with pytest.raises(ValueError, match='attesi'):
            gen.render_audio()


# =============================================================================
# 5. PARALLELISMO
# =============================================================================

class TestParallelRendering:

    @pytest.mark.parametrize('workers', [2, 4, 8])
    def test_parallel_equals_sequential(self, generator_from_envelopes, workers):
        sequential = generator_from_envelopes.render_audio()
        parallel = generator_from_envelopes.render_audio(max_workers=workers)
        np.testing.assert_array_equal(sequential, parallel)

    def test_parallel_uses_worker_threads(self, three_paxel_specification):
        thread_names = set()

        def recording_oscillator(paxel, config):
            thread_names.add(threading.current_thread().name)
            return render_paxel(paxel, config)

        gen = PartialGenerator(three_paxel_specification, set(), oscillator=recording_oscillator)
        gen.render_audio(max_workers=2)
        assert all(name.startswith('Paxel') for name in thread_names)

    def test_independent_generators_concurrently(self, envelopes_1000, envelopes_constant):
        gen_a = PartialGenerator.from_envelopes(envelopes_1000, {'a'}, 256, 50)
        gen_b = PartialGenerator.from_envelopes(envelopes_constant, {'b'}, 128, 0)
        expected_a = gen_a.render_audio()
        expected_b = gen_b.render_audio()

        with ThreadPoolExecutor(max_workers=2) as executor:
            future_a = executor.submit(gen_a.render_audio)
            future_b = executor.submit(gen_b.render_audio)
            np.testing.assert_array_equal(future_a.result(), expected_a)
            np.testing.assert_array_equal(future_b.result(), expected_b)
