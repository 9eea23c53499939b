from .basegenerator import BaseGenerator
from .lhs import LatinHypercubeGenerator
from .morris import MorrisGenerator

__all__ = ("BaseGenerator",
           "LatinHypercubeGenerator",
           "MorrisGenerator",
           )
