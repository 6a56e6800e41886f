# paxel_builder.py
"""
Staging objects used while a partial is being mapped onto the paxel grid.

Design Pattern: Builder
- PaxelBuilder: mutable record, every field starts unset (None).
  freeze() produces an immutable PaxelSpecification or fails loudly.
- PositionedPaxelBuilder: a builder tagged with its start position in the
  partial, ordered by that position.
- PaxelBuilderArena: sorted, index-addressed collection of positioned
  builders. Independent passes over an envelope use find_or_insert() to reach
  the builder of a given grid paxel and fill only their own fields.

None of these objects leave the mapper: only frozen paxels do.
"""

from bisect import bisect_left
from dataclasses import dataclass, field, fields
from typing import Iterator, List, Optional

from paxels.paxel_specification import PaxelSpecification, PaxelSpecificationError


class IncompletePaxelError(PaxelSpecificationError):
    """freeze() chiamato su un builder con campi ancora non impostati."""

    def __init__(self, missing_fields: List[str], position: Optional[int] = None):
        self.missing_fields = list(missing_fields)
        self.position = position
        where = f" (paxel @ {position})" if position is not None else ""
        super().__init__(
            f"Paxel incompleto{where}: campi non impostati {', '.join(self.missing_fields)}"
        )


@dataclass
class PaxelBuilder:
    """
    Versione mutabile di PaxelSpecification.

    Non garantisce alcun invariante: serve solo ad accumulare i campi
    durante i pass del mapper. None significa "non ancora impostato".
    """
    start_frequency: Optional[float] = None
    end_frequency: Optional[float] = None
    start_amplitude: Optional[float] = None
    end_amplitude: Optional[float] = None
    start_phase: Optional[float] = None
    end_phase: Optional[float] = None
    duration_samples: Optional[int] = None
    start_sample: Optional[int] = None
    end_sample: Optional[int] = None

    def set_span(self, start_sample: int, duration_samples: int) -> None:
        """Imposta i tre campi di posizione in modo coerente."""
        self.start_sample = start_sample
        self.duration_samples = duration_samples
        self.end_sample = start_sample + duration_samples - 1

    def missing_fields(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is None]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def freeze(self) -> PaxelSpecification:
        """
        Congela il builder in un PaxelSpecification.

        Raises:
            IncompletePaxelError: se almeno un campo non è stato impostato
            PaxelSpecificationError: se i valori violano gli invarianti
        """
        missing = self.missing_fields()
        if missing:
            raise IncompletePaxelError(missing, position=self.start_sample)

        return PaxelSpecification(
            start_frequency=self.start_frequency,
            end_frequency=self.end_frequency,
            start_amplitude=self.start_amplitude,
            end_amplitude=self.end_amplitude,
            start_phase=self.start_phase,
            end_phase=self.end_phase,
            duration_samples=self.duration_samples,
            start_sample=self.start_sample,
            end_sample=self.end_sample,
        )


@dataclass(eq=True)
class PositionedPaxelBuilder:
    """Builder associato alla sua posizione assoluta nel parziale."""
    position: int
    builder: PaxelBuilder = field(default_factory=PaxelBuilder)

    # Ordinamento solo per posizione
    def __lt__(self, other: 'PositionedPaxelBuilder') -> bool:
        if not isinstance(other, PositionedPaxelBuilder):
            return NotImplemented
        return self.position < other.position


class PaxelBuilderArena:
    """
    Arena di PositionedPaxelBuilder ordinata per posizione.

    I pass accedono ai builder per indice; find_or_insert() garantisce che
    una stessa posizione abbia un solo builder.
    """

    def __init__(self):
        self._positions: List[int] = []
        self._entries: List[PositionedPaxelBuilder] = []

    def index_of(self, position: int) -> Optional[int]:
        i = bisect_left(self._positions, position)
        if i < len(self._positions) and self._positions[i] == position:
            return i
        return None

    def find_or_insert(self, position: int) -> int:
        """
        Ritorna l'indice del builder in posizione `position`,
        creandolo se non esiste.
        """
        i = bisect_left(self._positions, position)
        if i < len(self._positions) and self._positions[i] == position:
            return i
        self._positions.insert(i, position)
        self._entries.insert(i, PositionedPaxelBuilder(position))
        return i

    def __getitem__(self, index: int) -> PaxelBuilder:
        return self._entries[index].builder

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PositionedPaxelBuilder]:
        return iter(self._entries)

    @property
    def positions(self) -> List[int]:
        return list(self._positions)

    def freeze(self) -> List[PaxelSpecification]:
        """Congela tutti i builder, in ordine di posizione."""
        return [entry.builder.freeze() for entry in self._entries]
