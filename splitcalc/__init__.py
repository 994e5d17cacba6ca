"""
Splitcalc - Source Package

The embedded calculator behind a household expense splitter: family
members type meal and transport costs as small arithmetic expressions,
and the calculator turns them into a single amount for the form.

DESIGN PRINCIPLES:
1. Every key press produces a valid, editable buffer
2. Evaluation never executes code - allow-list plus a real parser
3. Errors are values, not crashes
4. Nothing reaches the form until the user confirms
"""

__version__ = "1.0.0"
__author__ = "Splitcalc Team"
