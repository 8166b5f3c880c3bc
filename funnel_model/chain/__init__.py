__all__ = [
    "MarkovState",
    "TransitionProbability",
    "MarkovChainResult",
    "MarkovChainError",
    "SingularMatrixError",
    "MarkovChainCalculator",
    "create_subscription_markov_chain",
    "load_chain_definition",
    "validate_transition_matrix",
]

from .calculator import MarkovChainCalculator
from .exceptions import MarkovChainError, SingularMatrixError
from .loader import load_chain_definition, validate_transition_matrix
from .models import MarkovChainResult, MarkovState, TransitionProbability
from .subscription import create_subscription_markov_chain
