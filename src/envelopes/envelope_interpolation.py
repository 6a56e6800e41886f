# envelope_interpolation.py

from abc import ABC, abstractmethod
from typing import Dict, List, Type


class InterpolationStrategy(ABC):
    """Strategy base per interpolazione tra breakpoints [[t, v], ...] ordinati."""

    @abstractmethod
    def evaluate(self, t: float, breakpoints: List[List[float]]) -> float:
        """Valuta la curva al tempo t (in campioni)."""
        pass


class LinearInterpolation(InterpolationStrategy):
    """Interpolazione lineare tra breakpoints, hold ai bordi."""

    def evaluate(self, t: float, breakpoints: List[List[float]]) -> float:
        if t <= breakpoints[0][0]:
            return breakpoints[0][1]
        if t >= breakpoints[-1][0]:
            return breakpoints[-1][1]

        for i in range(len(breakpoints) - 1):
            t0, v0 = breakpoints[i]
            t1, v1 = breakpoints[i + 1]

            if t0 <= t <= t1:
                alpha = (t - t0) / (t1 - t0) if t1 > t0 else 0.0
                return v0 + alpha * (v1 - v0)

        return breakpoints[-1][1]


class StepInterpolation(InterpolationStrategy):
    """Interpolazione a gradini: vale l'ultimo breakpoint <= t."""

    def evaluate(self, t: float, breakpoints: List[List[float]]) -> float:
        for i in range(len(breakpoints) - 1, -1, -1):
            if t >= breakpoints[i][0]:
                return breakpoints[i][1]
        return breakpoints[0][1]


class InterpolationStrategyFactory:
    """Factory per le strategy di interpolazione, per nome."""

    _STRATEGIES: Dict[str, Type[InterpolationStrategy]] = {
        'linear': LinearInterpolation,
        'step': StepInterpolation,
    }

    @classmethod
    def create(cls, interp_type: str) -> InterpolationStrategy:
        strategy_class = cls._STRATEGIES.get(interp_type)
        if strategy_class is None:
            raise ValueError(
                f"Tipo interpolazione non supportato: '{interp_type}'. "
                f"Disponibili: {sorted(cls._STRATEGIES)}"
            )
        return strategy_class()

    @classmethod
    def available(cls) -> List[str]:
        return sorted(cls._STRATEGIES)
