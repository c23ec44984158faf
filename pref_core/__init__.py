"""Dichotomy preference scoring with a 2PL IRT theta estimator."""

__version__ = "1.0.0"
