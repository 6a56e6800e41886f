# envelope_mapper.py
"""
EnvelopeGridMapper: quantizza envelope continui su una griglia di paxel.

Pipeline:
1. grid_layout(): divide la durata in paxel (lead-in opzionale, paxel di
   griglia, ultimo paxel troncato)
2. pass indipendenti su un PaxelBuilderArena:
   span → frequenza → ampiezza → fase
3. freeze dei builder e assemblaggio del PartialSpecification

Le curve sono valutate una sola volta per ogni bordo di griglia: il valore
finale del paxel i è lo stesso float del valore iniziale del paxel i+1.
La fase non viene letta da nessuna curva, è accumulata in forma chiusa con
la stessa formula usata dall'oscillatore.
"""

from typing import List, Optional, Tuple

from paxels.paxel_builder import PaxelBuilderArena
from paxels.paxel_specification import PartialSpecification, accumulated_phase
from partials.render_config import DEFAULT_RENDER_CONFIG, RenderConfig
from shared.logger import log_clip_warning, log_grid_layout

GridLayout = List[Tuple[int, int]]

AMPLITUDE_BOUNDS = (0.0, 1.0)


class EnvelopeGridMapper:
    """
    Converte PartialEnvelopes in PartialSpecification su griglia fissa.

    La griglia ha linee a offset_samples + k * paxel_duration_samples.
    Con offset != 0 il primo paxel (lead-in) copre [0, offset): l'envelope
    parte dal campione 0 e tutti i bordi successivi cadono sulla griglia
    spostata. La durata totale coincide sempre con quella dell'envelope.
    """

    def __init__(
        self,
        paxel_duration_samples: int,
        offset_samples: int = 0,
        config: Optional[RenderConfig] = None
    ):
        if isinstance(paxel_duration_samples, bool) or not isinstance(paxel_duration_samples, int) \
                or paxel_duration_samples <= 0:
            raise ValueError(
                f"paxel_duration_samples deve essere un intero > 0, "
                f"ricevuto: {paxel_duration_samples}"
            )
        if isinstance(offset_samples, bool) or not isinstance(offset_samples, int) \
                or not 0 <= offset_samples < paxel_duration_samples:
            raise ValueError(
                f"offset_samples deve essere in [0, {paxel_duration_samples}), "
                f"ricevuto: {offset_samples}"
            )

        self.paxel_duration_samples = paxel_duration_samples
        self.offset_samples = offset_samples
        self.config = config or DEFAULT_RENDER_CONFIG

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def grid_layout(self, duration_samples: int) -> GridLayout:
        """
        Calcola gli span (start, durata) dei paxel per una data durata.

        Examples (paxel=256):
            offset=0,  1000 → [(0,256), (256,256), (512,256), (768,232)]
            offset=50, 1000 → [(0,50), (50,256), (306,256), (562,256), (818,182)]
        """
        if duration_samples <= 0:
            raise ValueError(
                f"La durata dell'envelope deve essere > 0, ricevuto: {duration_samples}"
            )

        layout: GridLayout = []
        start = 0

        if self.offset_samples:
            lead_in = min(self.offset_samples, duration_samples)
            layout.append((0, lead_in))
            start = lead_in

        while start < duration_samples:
            duration = min(self.paxel_duration_samples, duration_samples - start)
            layout.append((start, duration))
            start += duration

        return layout

    def map(self, envelopes) -> PartialSpecification:
        """
        Args:
            envelopes: oggetto con duration_samples, start_phase,
                       frequency_at(sample), amplitude_at(sample)

        Returns:
            PartialSpecification contiguo che copre [0, duration_samples)

        Raises:
            ValueError: durata non valida
            IncompletePaxelError: un pass non ha coperto tutti i campi
        """
        layout = self.grid_layout(envelopes.duration_samples)
        log_grid_layout(
            self.paxel_duration_samples, self.offset_samples,
            envelopes.duration_samples, layout
        )

        arena = PaxelBuilderArena()
        self._span_pass(arena, layout)
        self._frequency_pass(arena, layout, envelopes)
        self._amplitude_pass(arena, layout, envelopes)
        self._phase_pass(arena, layout, envelopes.start_phase)

        return PartialSpecification(arena.freeze())

    # =========================================================================
    # PASSES
    # =========================================================================

    @staticmethod
    def _boundaries(layout: GridLayout) -> List[int]:
        """Bordi di griglia: start di ogni paxel + fine dell'ultimo."""
        return [start for start, _ in layout] + [layout[-1][0] + layout[-1][1]]

    def _span_pass(self, arena: PaxelBuilderArena, layout: GridLayout) -> None:
        for start, duration in layout:
            arena[arena.find_or_insert(start)].set_span(start, duration)

    def _frequency_pass(self, arena: PaxelBuilderArena, layout: GridLayout, envelopes) -> None:
        bounds = (0.0, self.config.nyquist)
        values = [
            self._clip('frequency', b, envelopes.frequency_at(b), *bounds)
            for b in self._boundaries(layout)
        ]
        for i, (start, _) in enumerate(layout):
            builder = arena[arena.find_or_insert(start)]
            builder.start_frequency = values[i]
            builder.end_frequency = values[i + 1]

    def _amplitude_pass(self, arena: PaxelBuilderArena, layout: GridLayout, envelopes) -> None:
        values = [
            self._clip('amplitude', b, envelopes.amplitude_at(b), *AMPLITUDE_BOUNDS)
            for b in self._boundaries(layout)
        ]
        for i, (start, _) in enumerate(layout):
            builder = arena[arena.find_or_insert(start)]
            builder.start_amplitude = values[i]
            builder.end_amplitude = values[i + 1]

    def _phase_pass(self, arena: PaxelBuilderArena, layout: GridLayout, start_phase: float) -> None:
        # Richiede frequenze e durate già impostate
        phase = start_phase % 1.0
        for start, _ in layout:
            builder = arena[arena.find_or_insert(start)]
            builder.start_phase = phase
            advance = accumulated_phase(
                builder.start_frequency,
                builder.end_frequency,
                builder.duration_samples,
                self.config.sample_rate,
            )
            phase = (phase + advance) % 1.0
            builder.end_phase = phase

    @staticmethod
    def _clip(param_name: str, position: int, value: float,
              min_val: float, max_val: float) -> float:
        clipped = min(max(value, min_val), max_val)
        if clipped != value:
            log_clip_warning(param_name, position, value, clipped, min_val, max_val)
        return clipped


def map_envelopes_to_paxels(
    envelopes,
    paxel_duration_samples: int,
    offset_samples: int = 0,
    config: Optional[RenderConfig] = None
) -> PartialSpecification:
    """Scorciatoia funzionale per EnvelopeGridMapper(...).map(envelopes)."""
    mapper = EnvelopeGridMapper(paxel_duration_samples, offset_samples, config)
    return mapper.map(envelopes)
