# render_config.py
from dataclasses import dataclass, fields
from typing import Any, Dict

import numpy as np


@dataclass(frozen=True)
class RenderConfig:
    """
    Configurazione audio condivisa da mapper, oscillatore e generatore.

    - sample_rate: frequenza di campionamento in Hz. Serve al mapper per
      calcolare la fase accumulata e all'oscillatore per riprodurla.
    - sample_dtype: tipo intero con segno dei campioni prodotti ('int16',
      'int32', ...). Il generatore si limita a concatenarli.
    """
    sample_rate: int = 48000
    sample_dtype: str = 'int32'

    def __post_init__(self):
        if (isinstance(self.sample_rate, bool)
                or not isinstance(self.sample_rate, int)
                or self.sample_rate <= 0):
            raise ValueError(
                f"sample_rate deve essere un intero positivo, ricevuto: {self.sample_rate}"
            )
        try:
            dtype = np.dtype(self.sample_dtype)
        except TypeError as exc:
            raise ValueError(f"sample_dtype non valido: {self.sample_dtype}") from exc
        if dtype.kind != 'i':
            raise ValueError(
                f"sample_dtype deve essere un intero con segno, ricevuto: {self.sample_dtype}"
            )

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2.0

    @property
    def full_scale(self) -> int:
        """Valore massimo rappresentabile dal tipo dei campioni."""
        return int(np.iinfo(self.sample_dtype).max)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], allow_none: bool = True) -> 'RenderConfig':
        """
        Costruisce la configurazione da un dict (chiavi sconosciute ignorate).

        Args:
            data: dict con alcune delle chiavi 'sample_rate', 'sample_dtype'
            allow_none: se False, le chiavi con valore None usano il default
        """
        field_names = [f.name for f in fields(cls)]

        if allow_none:
            kwargs = {name: data[name] for name in field_names if name in data}
        else:
            kwargs = {
                name: data[name]
                for name in field_names
                if name in data and data[name] is not None
            }
        return cls(**kwargs)


DEFAULT_RENDER_CONFIG = RenderConfig()
