"""Pydantic models for training reports.

These are what the CLI serialises for ``--format json``.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CostSample(BaseModel):
    """Cost observed at one training iteration"""

    iteration: int = Field(..., description="Zero-based iteration number")
    sample_index: int = Field(..., description="Dataset index trained on")
    cost: float = Field(..., description="Quadratic cost before the update")


class TrainingReport(BaseModel):
    """Summary of one call to Network.train"""

    model_config = ConfigDict(use_enum_values=True)

    structure: list[int] = Field(..., description="Layer sizes, input first")
    learning_rate: float = Field(..., description="Step size used for updates")
    update_rule: str = Field(..., description="Parameter update convention")
    sampling: str = Field(..., description="Sample selection strategy")
    iterations: int = Field(..., description="Number of training iterations performed")
    start_time: float = Field(..., description="Training start timestamp")
    duration: float = Field(0.0, description="Training duration in seconds")
    final_cost: Optional[float] = Field(None, description="Cost at the last iteration")
    mean_cost: Optional[float] = Field(None, description="Mean cost over all iterations")
    cost_history: list[CostSample] = Field(default_factory=list, description="Costs recorded at log intervals")
    accuracy: Optional[float] = Field(None, description="Classification accuracy after training")
    evaluated_samples: Optional[int] = Field(None, description="Number of samples the accuracy was measured on")

    def record(self, iteration: int, sample_index: int, cost: float) -> None:
        self.cost_history.append(CostSample(iteration=iteration, sample_index=sample_index, cost=cost))
