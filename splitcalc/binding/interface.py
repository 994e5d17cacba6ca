"""
Abstract Form Binding Interface

DESIGN DECISION: The calculator never touches the expense form directly.
A binding resolves a dotted field path to a location in the form and
reads or writes it. This allows us to:
1. Use an in-memory expense tree for testing
2. Bind to whatever state container the host UI uses
3. Keep the calculator free of any knowledge of the form's shape
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class FormBindingInterface(ABC):
    """
    Abstract interface for reading and writing form fields by path.

    Paths are dot-delimited; integer segments index lists,
    e.g. "reimbursable.me.meal.2.amount".
    """

    @abstractmethod
    def read(self, path: str) -> str:
        """
        Read a field as a plain string for seeding the calculator.

        Args:
            path: Dotted field path

        Returns:
            The value without thousands separators, or "" if unset

        Raises:
            PathNotFoundError: If the path does not lead to a field
        """
        pass

    @abstractmethod
    def assign(self, path: str, value: Decimal) -> None:
        """
        Write a confirmed value to a field.

        Args:
            path: Dotted field path
            value: The confirmed amount

        Raises:
            PathNotFoundError: If the path does not lead to a field
        """
        pass


class BindingError(Exception):
    """Base exception for form binding operations."""
    pass


class PathNotFoundError(BindingError):
    """The path does not resolve to a field."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)
