# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FormState exceptions."""

from __future__ import annotations

from typing import Any, Sequence


class FormStateError(Exception):
    """Base exception for FormState errors."""

    pass


class StructuralError(FormStateError):
    """Raised when a live field structure cannot be snapshotted.

    Duplicate sibling names, empty names and cycles all end up here.
    """

    pass


class ResolutionError(FormStateError):
    """Raised when no strategy matches a (kind, name, namespace path) request.

    This is a configuration or programming error (a missing or misnamed
    strategy), never a form validation failure.

    Attributes:
        kind: The strategy kind that was requested.
        name: The strategy name that was requested.
        namespace_path: The full namespace path that was searched,
            default namespace included.
    """

    def __init__(self, kind: Any, name: str, namespace_path: Sequence[str]) -> None:
        self.kind = kind
        self.name = name
        self.namespace_path = tuple(namespace_path)
        kind_label = getattr(kind, 'value', kind)
        super().__init__(
            f"No {kind_label} strategy named '{name}' in namespaces "
            f"{list(self.namespace_path)}"
        )


class DuplicateStrategyError(FormStateError):
    """Raised when a strategy key is registered twice without replace=True."""

    pass


class ConfigError(FormStateError):
    """Raised when a form configuration cannot be read or validated."""

    pass
