from .screening import MorrisScreening
from .storage import load_samples, save_samples

__all__ = ("MorrisScreening",
           "load_samples",
           "save_samples")
