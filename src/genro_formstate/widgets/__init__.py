# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Rendering strategies - base classes and the built-in HTML set."""

from .base import FieldWidget, FormWidget, WrapperWidget, attrs, escape
from .html import BUILTIN_STRATEGIES

__all__ = [
    'FieldWidget',
    'WrapperWidget',
    'FormWidget',
    'BUILTIN_STRATEGIES',
    'attrs',
    'escape',
]
