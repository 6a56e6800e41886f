# src/partials/partial_generator.py
"""
PartialGenerator: facciata per la sintesi di un singolo parziale.

Due percorsi di costruzione:
- diretto: PartialGenerator(partial_specification, labels)
- da envelope: PartialGenerator.from_envelopes(envelopes, labels,
  paxel_duration_samples, offset_samples)

Il rendering delega ogni paxel all'oscillatore e concatena i risultati in
ordine temporale. La continuità di fase è già risolta nella specifica, quindi
i paxel sono indipendenti e possono essere sintetizzati in parallelo.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, FrozenSet, Iterable, Optional

import numpy as np

from paxels.paxel_specification import PartialSpecification, PaxelSpecification
from partials.envelope_mapper import EnvelopeGridMapper
from partials.render_config import DEFAULT_RENDER_CONFIG, RenderConfig
from rendering.paxel_oscillator import render_paxel
from shared.logger import log_partial_rendered

Oscillator = Callable[[PaxelSpecification, RenderConfig], np.ndarray]


class PartialGenerator:
    """
    Possiede la specifica di un parziale e le sue etichette.

    Public API:
    - get_partial_specification() -> PartialSpecification
    - get_labels() -> FrozenSet[str]
    - render_audio(max_workers=None) -> np.ndarray

    Attributes:
        config: RenderConfig usato per mapping e rendering
        oscillator: funzione (paxel, config) -> campioni
    """

    def __init__(
        self,
        partial_specification: PartialSpecification,
        labels: Iterable[str],
        config: Optional[RenderConfig] = None,
        oscillator: Optional[Oscillator] = None
    ):
        """
        Args:
            partial_specification: paxel già congelati, in ordine temporale
            labels: insieme di etichette (stringhe opache)
            config: configurazione audio (default DEFAULT_RENDER_CONFIG)
            oscillator: sintesi per paxel (default render_paxel)
        """
        if isinstance(labels, str):
            raise TypeError(
                f"labels deve essere un insieme di stringhe, non una stringa: {labels!r}"
            )
        self._partial_specification = partial_specification
        self._labels = frozenset(labels)
        self._config = config or DEFAULT_RENDER_CONFIG
        self._oscillator = oscillator or render_paxel

    @classmethod
    def from_envelopes(
        cls,
        partial_envelopes,
        labels: Iterable[str],
        paxel_duration_samples: int,
        offset_samples: int = 0,
        config: Optional[RenderConfig] = None,
        oscillator: Optional[Oscillator] = None
    ) -> 'PartialGenerator':
        """
        Costruisce il generatore quantizzando gli envelope sulla griglia.

        Args:
            partial_envelopes: input continuo (vedi PartialEnvelopes)
            labels: insieme di etichette
            paxel_duration_samples: passo della griglia in campioni (> 0)
            offset_samples: spostamento della griglia, in [0, paxel_duration_samples)
        """
        config = config or DEFAULT_RENDER_CONFIG
        mapper = EnvelopeGridMapper(paxel_duration_samples, offset_samples, config)
        return cls(mapper.map(partial_envelopes), labels, config, oscillator)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def config(self) -> RenderConfig:
        return self._config

    @property
    def oscillator(self) -> Oscillator:
        return self._oscillator

    def get_partial_specification(self) -> PartialSpecification:
        return self._partial_specification

    def get_labels(self) -> FrozenSet[str]:
        return self._labels

    def render_audio(self, max_workers: Optional[int] = None) -> np.ndarray:
        """
        Sintetizza l'intero parziale.

        Args:
            max_workers: se > 1, i paxel sono sintetizzati su un
                         ThreadPoolExecutor. L'ordine è preservato.

        Returns:
            np.ndarray di config.sample_dtype, lungo total_duration_samples
        """
        paxels = list(self._partial_specification)

        if max_workers and max_workers > 1 and len(paxels) > 1:
            with ThreadPoolExecutor(max_workers=max_workers,
                                    thread_name_prefix="Paxel") as executor:
                chunks = list(executor.map(self._render_paxel, paxels))
        else:
            chunks = [self._render_paxel(paxel) for paxel in paxels]

        if chunks:
            audio = np.concatenate(chunks)
        else:
            audio = np.zeros(0, dtype=self._config.sample_dtype)

        log_partial_rendered(self._labels, len(paxels), len(audio), max_workers)
        return audio

    def _render_paxel(self, paxel: PaxelSpecification) -> np.ndarray:
        samples = np.asarray(self._oscillator(paxel, self._config))
        if len(samples) != paxel.duration_samples:
            raise ValueError(
                f"L'oscillatore ha prodotto {len(samples)} campioni per il paxel "
                f"@ {paxel.start_sample} (attesi {paxel.duration_samples})"
            )
        return samples.astype(self._config.sample_dtype, copy=False)

    def __repr__(self):
        return (
            f"PartialGenerator(paxels={len(self._partial_specification)}, "
            f"samples={self._partial_specification.total_duration_samples}, "
            f"labels={sorted(self._labels)})"
        )
