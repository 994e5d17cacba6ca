"""
In-memory expense tree binding.

The household form is a nested structure of dicts and lists:

    reimbursable.<member>.meal       -> list of {"amount", "note"}
    reimbursable.<member>.transport  -> amount
    reimbursable.brother.printer_3d  -> amount
    our_own.<member>.meal / transport

Amounts are stored without thousands separators.
"""

import copy
from decimal import Decimal
from typing import Any, Optional

from splitcalc.binding.interface import FormBindingInterface, PathNotFoundError


def _empty_meal() -> dict[str, Any]:
    return {"amount": Decimal(0), "note": ""}


_INITIAL_TREE: dict[str, Any] = {
    "reimbursable": {
        "me": {"meal": [_empty_meal()], "transport": Decimal(0)},
        "wife": {"meal": [_empty_meal()], "transport": Decimal(0)},
        "brother": {
            "meal": [_empty_meal()],
            "transport": Decimal(0),
            "printer_3d": Decimal(0),
        },
    },
    "our_own": {
        "me": {"meal": [_empty_meal()], "transport": Decimal(0)},
        "wife": {"meal": [_empty_meal()], "transport": Decimal(0)},
    },
}


def default_expense_tree() -> dict[str, Any]:
    """A fresh household expense tree with every amount at zero."""
    return copy.deepcopy(_INITIAL_TREE)


class ExpenseTreeBinding(FormBindingInterface):
    """
    Form binding over a nested dict/list tree.

    Integer path segments index lists; every other segment is a dict key.
    """

    def __init__(self, tree: Optional[dict[str, Any]] = None):
        self._tree = tree if tree is not None else default_expense_tree()

    @property
    def tree(self) -> dict[str, Any]:
        return self._tree

    def _step(self, node: Any, segment: str, path: str) -> Any:
        if isinstance(node, list):
            try:
                return node[int(segment)]
            except (ValueError, IndexError):
                raise PathNotFoundError(path, f"No list item {segment!r} in {path!r}")
        if isinstance(node, dict):
            if segment not in node:
                raise PathNotFoundError(path, f"No field {segment!r} in {path!r}")
            return node[segment]
        raise PathNotFoundError(path, f"Cannot descend into {segment!r} in {path!r}")

    def _resolve_parent(self, path: str) -> tuple[Any, str]:
        """Return the container holding the last path segment and that segment."""
        if not path:
            raise PathNotFoundError(path, "Empty field path")
        parts = path.split(".")
        node: Any = self._tree
        for segment in parts[:-1]:
            node = self._step(node, segment, path)
        return node, parts[-1]

    def read(self, path: str) -> str:
        parent, key = self._resolve_parent(path)
        if isinstance(parent, dict):
            value = parent.get(key)
        else:
            value = self._step(parent, key, path)
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            raise PathNotFoundError(path, f"{path!r} is not a field")
        return str(value).replace(",", "")

    def assign(self, path: str, value: Decimal) -> None:
        parent, key = self._resolve_parent(path)
        if isinstance(parent, dict):
            parent[key] = value
            return
        if isinstance(parent, list):
            try:
                parent[int(key)] = value
                return
            except (ValueError, IndexError):
                raise PathNotFoundError(path, f"No list item {key!r} in {path!r}")
        raise PathNotFoundError(path, f"Cannot assign {key!r} in {path!r}")
