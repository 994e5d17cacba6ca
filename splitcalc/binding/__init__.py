"""
Form Binding Package

Provides the abstract binding interface and an in-memory expense tree.
"""

from splitcalc.binding.interface import (
    BindingError,
    FormBindingInterface,
    PathNotFoundError,
)
from splitcalc.binding.expense_tree import (
    ExpenseTreeBinding,
    default_expense_tree,
)

__all__ = [
    # Interface
    "FormBindingInterface",
    # Exceptions
    "BindingError",
    "PathNotFoundError",
    # In-memory implementation
    "ExpenseTreeBinding",
    "default_expense_tree",
]
