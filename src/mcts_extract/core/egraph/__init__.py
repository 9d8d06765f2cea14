from .generators import random_egraph
from .graph import EClass, EGraph, ENode

__all__ = ["EClass", "EGraph", "ENode", "random_egraph"]
