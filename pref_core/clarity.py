# pref_core/clarity.py
import math
from . import config
from .types import Dichotomy


def preference_for(theta: float, dichotomy: Dichotomy) -> str:
    t = float(theta)
    if t > 0.0: return dichotomy.positive_pole
    if t < 0.0: return dichotomy.negative_pole
    return dichotomy.tie_breaker  # exact zero only


def pci_from_theta(theta: float) -> int:
    t = abs(float(theta))
    if t == 0.0:
        return 1
    raw = t / config.THETA_MAX * config.PCI_MAX
    pci = int(math.floor(raw + 0.5))  # half-up, not banker's rounding
    return max(1, min(config.PCI_MAX, pci))


def pcc_category(pci: int) -> str:
    p = int(pci)
    for floor, label in config.PCC_THRESHOLDS:
        if p >= floor: return label
    return config.PCC_FLOOR
