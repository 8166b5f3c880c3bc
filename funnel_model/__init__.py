from funnel_model.chain.calculator import MarkovChainCalculator
from funnel_model.chain.subscription import create_subscription_markov_chain
from funnel_model.config.loaders import load_funnel_config

__all__ = ['MarkovChainCalculator', 'create_subscription_markov_chain', 'load_funnel_config']
