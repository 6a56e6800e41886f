# tests/conftest.py
import pytest
import sys
from pathlib import Path

# Aggiunge src/ al path (i package non hanno __init__.py)
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from envelopes.envelope import PartialEnvelopes
from paxels.paxel_specification import PaxelSpecification, PartialSpecification
from partials.render_config import RenderConfig
import shared.logger as logger_module

# =============================================================================
# LOGGER
# =============================================================================

@pytest.fixture(autouse=True)
def reset_render_logger():
    """Ogni test parte da un logger pulito, solo console, senza file."""
    logger_module.configure_render_logger()
    yield
    logger_module.configure_render_logger()

# =============================================================================
# FIXTURES CONFIG
# =============================================================================

@pytest.fixture
def render_config():
    """Config standard: 48 kHz, int32."""
    return RenderConfig(sample_rate=48000, sample_dtype='int32')

# =============================================================================
# FIXTURES PAXEL (Dati e Oggetti)
# =============================================================================

@pytest.fixture
def paxel_data():
    """Campi di un paxel valido: 100 campioni da 440 Hz a 880 Hz."""
    return {
        'start_frequency': 440.0,
        'end_frequency': 880.0,
        'start_amplitude': 0.5,
        'end_amplitude': 0.25,
        'start_phase': 0.0,
        'end_phase': 0.375,
        'duration_samples': 100,
        'start_sample': 0,
        'end_sample': 99,
    }


@pytest.fixture
def paxel(paxel_data):
    return PaxelSpecification(**paxel_data)


@pytest.fixture
def paxel_factory():
    """
    Factory per paxel costanti.

    Usage:
        def test_something(paxel_factory):
            p = paxel_factory(start=100, duration=50, frequency=220.0)
    """
    def _create(start=0, duration=100, frequency=440.0, amplitude=0.5,
                start_phase=0.0, end_phase=0.0):
        return PaxelSpecification(
            start_frequency=frequency,
            end_frequency=frequency,
            start_amplitude=amplitude,
            end_amplitude=amplitude,
            start_phase=start_phase,
            end_phase=end_phase,
            duration_samples=duration,
            start_sample=start,
            end_sample=start + duration - 1,
        )
    return _create


@pytest.fixture
def three_paxel_specification(paxel_factory):
    """Tre paxel contigui: 100 + 50 + 25 campioni."""
    return PartialSpecification((
        paxel_factory(start=0, duration=100),
        paxel_factory(start=100, duration=50),
        paxel_factory(start=150, duration=25),
    ))

# =============================================================================
# FIXTURES ENVELOPE
# =============================================================================

@pytest.fixture
def envelopes_1000():
    """
    Envelope di 1000 campioni.
    Frequenza: 440 → 880 Hz (glissando lineare)
    Ampiezza: 0 → 1 → 0 (triangolo)
    """
    return PartialEnvelopes.from_breakpoints(
        frequency=[[0, 440.0], [1000, 880.0]],
        amplitude=[[0, 0.0], [500, 1.0], [1000, 0.0]],
        duration_samples=1000,
    )


@pytest.fixture
def envelopes_constant():
    """Envelope costante: 1000 Hz, ampiezza 0.5, 4800 campioni."""
    return PartialEnvelopes.from_breakpoints(
        frequency=[[0, 1000.0]],
        amplitude=[[0, 0.5]],
        duration_samples=4800,
    )
