# paxel_specification.py
"""
Value objects for paxels and partials.

- PaxelSpecification: one fully specified, immutable paxel.
- PartialSpecification: the time-ordered sequence of paxels of one partial.
- accumulated_phase(): closed-form phase trajectory shared by the mapper
  (to predict end phases) and the oscillator (to reproduce them).

Phase is measured in cycles: 1.0 is one full turn of the sinusoid.
"""

import math
import numbers
from dataclasses import dataclass, fields
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np


class PaxelSpecificationError(ValueError):
    """Un paxel violerebbe i propri invarianti."""


_SAMPLE_FIELDS = ('duration_samples', 'start_sample', 'end_sample')


def accumulated_phase(
    start_frequency: float,
    end_frequency: float,
    duration_samples: int,
    sample_rate: int,
    n: Optional[Union[int, float, np.ndarray]] = None
) -> Union[float, np.ndarray]:
    """
    Phase (in cycles) accumulated after n samples of a paxel.

    Instantaneous frequency is linear in n, from start_frequency at n=0 to
    end_frequency at n=duration_samples. The phase is its integral:

        φ(n) = (f0·n + (f1 - f0)·n² / (2N)) / sample_rate

    Args:
        n: sample index (scalar or numpy array). Defaults to duration_samples,
           i.e. the phase advance over the whole paxel.
    """
    if n is None:
        n = duration_samples
    slope = (end_frequency - start_frequency) / (2.0 * duration_samples)
    return (start_frequency * n + slope * n * n) / sample_rate


@dataclass(frozen=True, slots=True)
class PaxelSpecification:
    """
    Paxel completamente specificato.

    Frequenza e ampiezza variano linearmente tra start ed end; la fase è
    espressa in cicli. start_sample / end_sample sono posizioni assolute
    (inclusive) all'interno del parziale.
    """
    start_frequency: float
    end_frequency: float
    start_amplitude: float
    end_amplitude: float
    start_phase: float
    end_phase: float
    duration_samples: int
    start_sample: int
    end_sample: int

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise PaxelSpecificationError(
                    f"{f.name} deve essere numerico, ricevuto: {value!r}"
                )
            if not math.isfinite(value):
                raise PaxelSpecificationError(f"{f.name} non finito: {value}")

        for name in _SAMPLE_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, numbers.Integral):
                raise PaxelSpecificationError(
                    f"{name} deve essere un intero, ricevuto: {value!r}"
                )

        if self.duration_samples < 1:
            raise PaxelSpecificationError(
                f"duration_samples deve essere >= 1, ricevuto: {self.duration_samples}"
            )
        if self.start_sample < 0:
            raise PaxelSpecificationError(
                f"start_sample deve essere >= 0, ricevuto: {self.start_sample}"
            )
        if self.end_sample != self.start_sample + self.duration_samples - 1:
            raise PaxelSpecificationError(
                f"end_sample incoerente: {self.end_sample} != "
                f"{self.start_sample} + {self.duration_samples} - 1"
            )
        if self.start_frequency < 0 or self.end_frequency < 0:
            raise PaxelSpecificationError(
                f"Frequenze negative: {self.start_frequency} → {self.end_frequency}"
            )
        for name in ('start_amplitude', 'end_amplitude'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise PaxelSpecificationError(f"{name} fuori da [0, 1]: {value}")

    @property
    def sample_range(self) -> range:
        """Posizioni assolute coperte dal paxel."""
        return range(self.start_sample, self.end_sample + 1)


@dataclass(frozen=True)
class PartialSpecification:
    """
    Sequenza ordinata di paxel contigui che descrive un parziale.

    La contiguità è garantita da chi costruisce la sequenza (il mapper);
    is_contiguous() è disponibile come diagnostica.
    """
    paxels: Tuple[PaxelSpecification, ...] = ()

    def __post_init__(self):
        # Accetta qualsiasi iterabile, conserva una tupla immutabile
        object.__setattr__(self, 'paxels', tuple(self.paxels))

    def __len__(self) -> int:
        return len(self.paxels)

    def __iter__(self) -> Iterator[PaxelSpecification]:
        return iter(self.paxels)

    def __getitem__(self, index):
        return self.paxels[index]

    @property
    def total_duration_samples(self) -> int:
        return sum(p.duration_samples for p in self.paxels)

    @property
    def boundaries(self) -> List[int]:
        """Start di ogni paxel più la fine (esclusiva) dell'ultimo."""
        if not self.paxels:
            return []
        return [p.start_sample for p in self.paxels] + [self.paxels[-1].end_sample + 1]

    def is_contiguous(self) -> bool:
        if not self.paxels:
            return True
        if self.paxels[0].start_sample != 0:
            return False
        return all(
            prev.end_sample + 1 == nxt.start_sample
            for prev, nxt in zip(self.paxels, self.paxels[1:])
        )
