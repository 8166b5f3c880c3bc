# funnel_model/chain/subscription.py

from typing import List, Tuple

from .models import MarkovState, TransitionProbability

# Canonical funnel states in matrix order; 'churned' is the absorbing state
VISITOR = "visitor"
REGISTERED = "registered"
SUBSCRIBER = "subscriber"
RETAINED = "retained"
CHURNED = "churned"

STATES = [VISITOR, REGISTERED, SUBSCRIBER, RETAINED, CHURNED]


def _check_rate(name: str, value: float) -> float:
    if not 0 <= value <= 100:
        raise ValueError(f"{name} must be a percentage between 0 and 100, got {value}")
    return value / 100


def create_subscription_markov_chain(
    registration_rate: float,
    join_rate: float,
    rebill_rate: float,
) -> Tuple[List[MarkovState], List[TransitionProbability]]:
    """
    Build the five-state subscription funnel from conversion percentages.

    Each active state either advances (or, for 'retained', stays) at the given
    rate or churns with the complement. 'churned' loops onto itself.

    Args:
        registration_rate: Visitor to registered, in percent
        join_rate: Registered to subscriber, in percent
        rebill_rate: Subscriber to retained and retained to retained, in percent

    Returns:
        Tuple of (states, transitions) ready for MarkovChainCalculator.
    """
    reg = _check_rate("registration_rate", registration_rate)
    join = _check_rate("join_rate", join_rate)
    rebill = _check_rate("rebill_rate", rebill_rate)

    states = [
        MarkovState(VISITOR, "Visitor", 100),
        MarkovState(REGISTERED, "Registered", 0),
        MarkovState(SUBSCRIBER, "Subscriber", 0),
        MarkovState(RETAINED, "Retained", 0),
        MarkovState(CHURNED, "Churned", 0, is_absorbing=True),
    ]

    transitions = [
        TransitionProbability(VISITOR, REGISTERED, reg),
        TransitionProbability(VISITOR, CHURNED, 1 - reg),
        TransitionProbability(REGISTERED, SUBSCRIBER, join),
        TransitionProbability(REGISTERED, CHURNED, 1 - join),
        TransitionProbability(SUBSCRIBER, RETAINED, rebill),
        TransitionProbability(SUBSCRIBER, CHURNED, 1 - rebill),
        TransitionProbability(RETAINED, RETAINED, rebill),
        TransitionProbability(RETAINED, CHURNED, 1 - rebill),
        TransitionProbability(CHURNED, CHURNED, 1.0),
    ]

    return states, transitions
