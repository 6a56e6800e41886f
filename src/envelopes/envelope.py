# envelope.py
"""
Envelope a breakpoints e input del mapper.

Formati supportati per i breakpoints (tempi in campioni):
- Lista: [[t, v], ...]
- Dict: {'type': 'step', 'points': [[t, v], ...]}

PartialEnvelopes raggruppa le curve di frequenza e ampiezza di un parziale
ed espone l'interfaccia letta da EnvelopeGridMapper:
duration_samples, start_phase, frequency_at(), amplitude_at().
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from envelopes.envelope_interpolation import InterpolationStrategyFactory

BreakpointData = Union[List[List[float]], Dict[str, Any]]


class Envelope:
    """
    Curva temporale definita da breakpoints.

    Fuori dall'intervallo coperto dai breakpoints mantiene il primo
    (prima) o l'ultimo (dopo) valore.
    """

    def __init__(self, breakpoints: BreakpointData):
        """
        Args:
            breakpoints: lista [[t, v], ...] oppure dict con 'type' e 'points'

        Examples:
            Envelope([[0, 440.0], [48000, 880.0]])
            Envelope({'type': 'step', 'points': [[0, 0.5], [1000, 0.25]]})
        """
        if isinstance(breakpoints, dict):
            self.type = breakpoints.get('type', 'linear')
            raw_points = breakpoints.get('points')
        elif isinstance(breakpoints, list):
            self.type = 'linear'
            raw_points = breakpoints
        else:
            raise ValueError(f"Formato envelope non valido: {breakpoints}")

        self.strategy = InterpolationStrategyFactory.create(self.type)
        self._breakpoints = self._parse_breakpoints(raw_points)

    @staticmethod
    def _parse_breakpoints(raw_points) -> List[List[float]]:
        if not raw_points:
            raise ValueError("Envelope deve contenere almeno un breakpoint.")

        for item in raw_points:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError(
                    f"Formato breakpoint non valido: {item}. "
                    "Deve essere [time, value]."
                )

        points = [[float(t), float(v)] for t, v in raw_points]
        # sorted() è stabile: breakpoints con lo stesso tempo restano in ordine
        return sorted(points, key=lambda p: p[0])

    @property
    def breakpoints(self) -> List[List[float]]:
        return [list(p) for p in self._breakpoints]

    @property
    def start_time(self) -> float:
        return self._breakpoints[0][0]

    @property
    def end_time(self) -> float:
        return self._breakpoints[-1][0]

    def evaluate(self, t: float) -> float:
        """Valuta l'envelope al tempo t (in campioni)."""
        return self.strategy.evaluate(t, self._breakpoints)

    def __repr__(self):
        return (
            f"Envelope(type={self.type}, points={len(self._breakpoints)}, "
            f"span={self.start_time:g}-{self.end_time:g})"
        )


@dataclass(frozen=True)
class PartialEnvelopes:
    """
    Descrizione continua di un parziale sull'intera durata.

    Attributes:
        frequency: envelope di frequenza (Hz) in funzione del campione
        amplitude: envelope di ampiezza lineare (0-1)
        duration_samples: durata del parziale in campioni
        start_phase: fase iniziale in cicli
    """
    frequency: Envelope
    amplitude: Envelope
    duration_samples: int
    start_phase: float = 0.0

    def __post_init__(self):
        if (isinstance(self.duration_samples, bool)
                or not isinstance(self.duration_samples, int)
                or self.duration_samples <= 0):
            raise ValueError(
                f"duration_samples deve essere un intero positivo, "
                f"ricevuto: {self.duration_samples}"
            )

    def frequency_at(self, sample: float) -> float:
        return self.frequency.evaluate(sample)

    def amplitude_at(self, sample: float) -> float:
        return self.amplitude.evaluate(sample)

    @classmethod
    def from_breakpoints(
        cls,
        frequency: BreakpointData,
        amplitude: BreakpointData,
        duration_samples: Optional[int] = None,
        start_phase: float = 0.0
    ) -> 'PartialEnvelopes':
        """
        Factory da dati raw.

        Se duration_samples è None usa l'ultimo breakpoint delle due curve
        (arrotondato per eccesso).
        """
        freq_env = Envelope(frequency)
        amp_env = Envelope(amplitude)

        if duration_samples is None:
            duration_samples = int(math.ceil(max(freq_env.end_time, amp_env.end_time)))

        return cls(
            frequency=freq_env,
            amplitude=amp_env,
            duration_samples=duration_samples,
            start_phase=start_phase,
        )
