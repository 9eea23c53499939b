from .elementaryeffects import MorrisEffects

__all__ = ("MorrisEffects",)
