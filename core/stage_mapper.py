# core/stage_mapper.py
from typing import Final, List, Optional, Sequence, Tuple
from core.entities import StageDefinition

DEFAULT_STAGE: Final[StageDefinition] = StageDefinition(
    name="default", weight_percent=100
)


class StageMapper:
    """
    Maps a progress percent to the active stage using cumulative weights.

    With stages [A30, B30, C40] the boundaries are 30/60/100: percent 30 is
    still A, 31 is B. A stage is entered only once its start threshold is
    exceeded, so names don't flap at exact boundaries.
    """

    def __init__(self, stages: Optional[Sequence[StageDefinition]] = None) -> None:
        self._stages: Tuple[StageDefinition, ...] = tuple(stages or ())
        self._bounds: List[float] = []
        total = 0.0
        for stage in self._stages:
            total += stage.weight_percent
            self._bounds.append(total)

    @property
    def stages(self) -> Tuple[StageDefinition, ...]:
        return self._stages

    def index_for(self, percent: float) -> int:
        """Index of the active stage, or -1 when only the default stage applies."""
        if not self._stages:
            return -1
        for i, bound in enumerate(self._bounds):
            if percent <= bound:
                return i
        # Weights summing to less than 100 leave the tail to the last stage
        return len(self._stages) - 1

    def stage_for(self, percent: float) -> StageDefinition:
        i = self.index_for(percent)
        return DEFAULT_STAGE if i < 0 else self._stages[i]
