# funnel_model/config/models.py
"""
Pydantic models for validating the structure and types of the configuration
loaded from YAML files (e.g., funnel.yaml).
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

# --- Funnel Parameters ---


class FunnelConfig(BaseModel):
    """Conversion rates and pricing for the subscription funnel.

    Rates are percentages on a 0-100 scale, as entered on the dashboard.
    """

    model_config = ConfigDict(extra="forbid")

    visitors: float = Field(10000, ge=0.0, description="Monthly visitors entering the funnel")
    registration_rate: float = Field(
        15.0, ge=0.0, le=100.0, description="Visitor to registered conversion (%)"
    )
    join_rate: float = Field(
        76.8, ge=0.0, le=100.0, description="Registered to subscriber conversion (%)"
    )
    rebill_rate: float = Field(
        89.2, ge=0.0, le=100.0, description="Monthly rebill / retention rate (%)"
    )
    monthly_price: float = Field(29.90, ge=0.0, description="Monthly subscription price")
    acquisition_cost: float = Field(0.0, ge=0.0, description="Customer acquisition cost")
    periods: int = Field(12, ge=0, description="Number of months to project")
    cohort_size: float = Field(100, gt=0.0, description="Cohort size for retention curves")


# --- Chain Definition Models ---


class StateConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    label: Optional[str] = None
    value: float = 0.0
    is_absorbing: bool = False


class TransitionConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    from_state: str = Field(..., alias="from")
    to_state: str = Field(..., alias="to")
    probability: float = Field(..., ge=0.0, le=1.0)


class ChainDefinition(BaseModel):
    """A custom Markov chain replacing the canonical subscription funnel."""

    model_config = ConfigDict(extra="forbid")

    states: List[StateConfig] = Field(..., min_length=1)
    transitions: List[TransitionConfig] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_unique_state_ids(self) -> 'ChainDefinition':
        """State ids fix matrix positions and must not repeat."""
        seen = set()
        for state in self.states:
            if state.id in seen:
                raise ValueError(f"Duplicate state id '{state.id}' in chain definition")
            seen.add(state.id)

        unknown = {
            t.from_state for t in self.transitions if t.from_state not in seen
        } | {t.to_state for t in self.transitions if t.to_state not in seen}
        if unknown:
            # The calculator drops these transitions
            logger.warning(f"Chain definition references unknown states: {sorted(unknown)}")
        return self


class ModelConfig(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(extra="forbid")

    funnel: FunnelConfig = Field(default_factory=FunnelConfig)
    chain: Optional[ChainDefinition] = None
