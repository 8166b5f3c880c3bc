import os
import sys

import pytest

# Ensure project root is on sys.path before imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from funnel_model.chain.calculator import MarkovChainCalculator
from funnel_model.chain.subscription import create_subscription_markov_chain


# Define pytest markers for test categories
def pytest_configure(config):
    """
    Register custom markers to avoid pytest warnings.
    """
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "chain: mark a test as a Markov chain test")
    config.addinivalue_line("markers", "config: mark a test as a config test")
    config.addinivalue_line("markers", "reporting: mark a test as a reporting test")


@pytest.fixture
def dashboard_calculator():
    """Calculator for the dashboard's default funnel (15%, 76.8%, 89.2%)."""
    states, transitions = create_subscription_markov_chain(15, 76.8, 89.2)
    return MarkovChainCalculator(states, transitions)
