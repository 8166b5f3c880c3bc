import logging
import os
from typing import List, Tuple

import numpy as np
import pandas as pd
import yaml
from pydantic import ValidationError

from funnel_model.config.models import ChainDefinition
from .models import MarkovState, TransitionProbability

logger = logging.getLogger(__name__)


def validate_transition_matrix(matrix: pd.DataFrame) -> None:
    """
    Validates that a transition matrix is properly formatted.

    Rows must either sum to 1.0 or be entirely zero (a state with no
    outgoing transitions).

    Args:
        matrix: DataFrame representing the Markov transition matrix

    Raises:
        ValueError: If the matrix is None, empty, not square or invalid
    """
    if matrix is None:
        raise ValueError("Transition matrix cannot be None")

    if not isinstance(matrix, pd.DataFrame):
        raise ValueError(f"Expected transition matrix to be a pandas DataFrame, got {type(matrix).__name__}")

    if matrix.empty:
        raise ValueError("Transition matrix is empty")

    if matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Transition matrix must be square, got shape {matrix.shape}")

    if (matrix < 0).any().any() or (matrix > 1).any().any():
        for i, row in matrix.iterrows():
            for col in matrix.columns:
                val = row[col]
                if not (0 <= val <= 1):
                    raise ValueError(
                        f"Invalid transition probability {val:.4f} at state={i}, next_state={col}. "
                        "All probabilities must be between 0 and 1."
                    )

    row_sums = matrix.sum(axis=1)
    valid = np.isclose(row_sums, 1.0, atol=1e-6) | (row_sums == 0)
    if not valid.all():
        raise ValueError(
            f"Invalid transition matrix: Rows must sum to 1.0 or be all zero. "
            f"Row sums: {row_sums.to_dict()}"
        )


def chain_from_definition(definition: ChainDefinition) -> Tuple[List[MarkovState], List[TransitionProbability]]:
    """Convert a validated chain definition into calculator inputs."""
    states = [
        MarkovState(s.id, s.label or s.id, s.value, is_absorbing=s.is_absorbing)
        for s in definition.states
    ]
    transitions = [
        TransitionProbability(t.from_state, t.to_state, t.probability)
        for t in definition.transitions
    ]
    return states, transitions


def load_chain_definition(path: str) -> Tuple[List[MarkovState], List[TransitionProbability]]:
    """
    Load a Markov chain definition from YAML.

    The YAML file should have the following structure:
    ```yaml
    states:
      - {id: trial, label: Trial}
      - {id: paid, label: Paid}
      - {id: churned, label: Churned, is_absorbing: true}
    transitions:
      - {from: trial, to: paid, probability: 0.4}
      - {from: trial, to: churned, probability: 0.6}
      - {from: paid, to: paid, probability: 0.9}
      - {from: paid, to: churned, probability: 0.1}
      - {from: churned, to: churned, probability: 1.0}
    ```

    Args:
      path: Path to the YAML file.

    Returns:
      Tuple of (states, transitions).

    Raises:
      FileNotFoundError: If the file is missing.
      ValueError: If the YAML cannot be parsed or does not describe a chain.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Chain definition file not found: {path}")

    logger.info(f"Loading chain definition from: {path}")

    try:
        with open(path, "r") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file {path}: {str(e)}")
        raise ValueError(f"Invalid YAML in chain definition file: {str(e)}")

    if not isinstance(yaml_data, dict) or 'states' not in yaml_data or 'transitions' not in yaml_data:
        raise ValueError(
            "YAML must contain 'states' (list) and 'transitions' (list) keys. "
            "See function docstring for expected format."
        )

    try:
        definition = ChainDefinition.model_validate(yaml_data)
    except ValidationError as e:
        logger.error(f"Invalid chain definition in {path}: {e}")
        raise ValueError(f"Invalid chain definition: {e}") from e

    states, transitions = chain_from_definition(definition)
    logger.info(f"Successfully loaded chain with states: {[s.id for s in states]}")
    return states, transitions
