#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/options/base.py
"""Base classes for classifier and pipeline options.

All configuration objects are frozen dataclasses; use ``create_updated`` to
derive a modified copy.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from pdf_inspector.exceptions import ValidationError


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        Raises
        ------
        ValidationError
            If a keyword does not name a field of this options class

        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ValidationError(
                f"Unknown option(s) for {type(self).__name__}: {', '.join(unknown)}",
                parameter_name=unknown[0],
            )
        return replace(self, **kwargs)


def require_positive(name: str, value: float) -> None:
    """Raise ``ValidationError`` unless ``value`` is strictly positive."""
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}", parameter_name=name, parameter_value=value)


def require_ratio(name: str, value: float, *, inclusive_zero: bool = True) -> None:
    """Raise ``ValidationError`` unless ``value`` lies in ``[0, 1]`` (or ``(0, 1]``)."""
    lower_ok = value >= 0.0 if inclusive_zero else value > 0.0
    if not (lower_ok and value <= 1.0):
        bracket = "[" if inclusive_zero else "("
        raise ValidationError(
            f"{name} must be in range {bracket}0.0, 1.0], got {value}", parameter_name=name, parameter_value=value
        )
