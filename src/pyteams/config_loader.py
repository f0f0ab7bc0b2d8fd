"""Persist and load balancing weight profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from pyteams.balance import PerformanceStrategy
from pyteams.config import BalanceWeights, FormationOverrides


@dataclass
class WeightsProfile:
    weights: BalanceWeights = field(default_factory=BalanceWeights)
    performance: PerformanceStrategy = field(default_factory=PerformanceStrategy)
    formations: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "WeightsProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeightsProfile":
        profile = cls(
            weights=BalanceWeights.model_validate(data.get("weights", {})),
            performance=PerformanceStrategy.model_validate(data.get("performance_weights", {})),
            formations=dict(data.get("formations", {})),
        )
        # Reject overrides whose counts do not add up to their team size.
        profile.overrides()
        return profile

    def overrides(self) -> FormationOverrides:
        return FormationOverrides.from_mapping(self.formations)

    def save(self, path: Path) -> None:
        payload = {
            "weights": self.weights.model_dump(),
            "performance_weights": {
                "power_weight": self.performance.power_weight,
                "goal_weight": self.performance.goal_weight,
            },
            "formations": self.formations,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
