# =============================================================================
# PAXEL OSCILLATOR - sintesi sinusoidale di un singolo paxel
# =============================================================================

from typing import Optional

import numpy as np

from paxels.paxel_specification import PaxelSpecification, accumulated_phase
from partials.render_config import DEFAULT_RENDER_CONFIG, RenderConfig

TWO_PI = 2.0 * np.pi


def paxel_phase(paxel: PaxelSpecification, sample_rate: int) -> np.ndarray:
    """
    Traiettoria di fase (in cicli, non ridotta) dei campioni del paxel.

    Il campione n ha fase start_phase + φ(n); φ(N) è l'avanzamento che il
    mapper ha usato per calcolare end_phase.
    """
    n = np.arange(paxel.duration_samples, dtype=np.float64)
    return paxel.start_phase + accumulated_phase(
        paxel.start_frequency,
        paxel.end_frequency,
        paxel.duration_samples,
        sample_rate,
        n,
    )


def paxel_amplitude(paxel: PaxelSpecification) -> np.ndarray:
    """Rampa lineare di ampiezza da start_amplitude (n=0) verso end_amplitude (n=N)."""
    n = np.arange(paxel.duration_samples, dtype=np.float64)
    return paxel.start_amplitude + (paxel.end_amplitude - paxel.start_amplitude) * (
        n / paxel.duration_samples
    )


def render_paxel(paxel: PaxelSpecification, config: Optional[RenderConfig] = None) -> np.ndarray:
    """
    Genera esattamente paxel.duration_samples campioni interi.

    sample[n] = round(a(n) * sin(2π·φ(n)) * full_scale)

    Args:
        paxel: paxel congelato
        config: sample_rate e dtype dei campioni (default DEFAULT_RENDER_CONFIG)

    Returns:
        np.ndarray di tipo config.sample_dtype
    """
    config = config or DEFAULT_RENDER_CONFIG

    # Riduce la fase prima del seno per limitare l'errore su argomenti grandi
    phase = np.mod(paxel_phase(paxel, config.sample_rate), 1.0)
    signal = paxel_amplitude(paxel) * np.sin(TWO_PI * phase)

    full_scale = config.full_scale
    limit = _float_limit(full_scale)
    scaled = np.clip(np.rint(signal * full_scale), -limit, limit)
    return scaled.astype(config.sample_dtype)


def _float_limit(full_scale: int) -> float:
    """
    Massimo float che sta nel tipo intero.

    Per int64 float(full_scale) arrotonda a 2**63, fuori range: si scende
    al float precedente, che è un intero esatto.
    """
    limit = float(full_scale)
    if int(limit) > full_scale:
        limit = float(np.nextafter(limit, 0.0))
    return limit
