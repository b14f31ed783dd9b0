"""
Constraint dependency and mitigation optimization engine.

Models operational and strategic constraints as a dependency graph,
quantifies their cascading impact, selects budget-bounded mitigation
plans and composes/compares what-if scenarios.
"""

__version__ = "0.1.0"

from constraint_engine.engine.modeler import ConstraintModeler
from constraint_engine.errors import (
    ConstraintEngineError,
    DegenerateResultError,
    InvalidInputError,
    NotFoundError,
)

__all__ = [
    "ConstraintEngineError",
    "ConstraintModeler",
    "DegenerateResultError",
    "InvalidInputError",
    "NotFoundError",
]
