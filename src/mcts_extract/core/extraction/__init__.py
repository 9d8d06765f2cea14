from .state import ExtractionState
from .term import Term

__all__ = ["ExtractionState", "Term"]
