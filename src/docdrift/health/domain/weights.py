"""Health score weights."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthWeights:
    """
    Relative weights of the health components.

    Completeness and accuracy count twice as much as example validity. When
    examples were not validated, the remaining weights are renormalized, so
    a spec without example results is scored on completeness and accuracy
    alone (50/50 with the defaults).
    """

    completeness: float = 0.4
    accuracy: float = 0.4
    examples: float = 0.2

    def __post_init__(self) -> None:
        if min(self.completeness, self.accuracy, self.examples) < 0:
            raise ValueError("Health weights must not be negative")
        if self.completeness + self.accuracy <= 0:
            raise ValueError("Completeness and accuracy weights cannot both be zero")

    @classmethod
    def from_settings(cls, settings) -> "HealthWeights":
        return cls(
            completeness=settings.weight_completeness,
            accuracy=settings.weight_accuracy,
            examples=settings.weight_examples,
        )


DEFAULT_HEALTH_WEIGHTS = HealthWeights()
