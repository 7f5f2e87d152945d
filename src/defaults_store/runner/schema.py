# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for runner input/output.

These Pydantic models define the JSON contract of
``python -m defaults_store.runner``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from defaults_store.config import StoreConfig
from defaults_store.keys import DefaultsKey


class OperationSchema(BaseModel):
    """Single operation against the settings store.

    Attributes:
        op: Operation ("get", "set", "remove" or "remove_all")
        kind: Accessor kind ("primitive" or "structured")
        key: Setting name; required for everything but "remove_all"
        value: New value for "set" (``null`` removes)
    """

    op: Literal["get", "set", "remove", "remove_all"]
    kind: Literal["primitive", "structured"] = "primitive"
    key: DefaultsKey | None = None
    value: Any = None


class RunnerInput(BaseModel):
    """Complete input read from stdin.

    Attributes:
        store: Store configuration
        operations: Operations to apply, in order
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    operations: list[OperationSchema] = Field(default_factory=list)


class OperationResultSchema(BaseModel):
    """Outcome of one operation.

    Attributes:
        op: Operation that ran
        kind: Accessor kind it ran against
        key: Setting name (``None`` for "remove_all")
        ok: Whether the operation took effect
        value: Value read by "get"; keys left behind by "remove_all"
    """

    op: str
    kind: str
    key: str | None = None
    ok: bool = True
    value: Any = None


class RunnerOutput(BaseModel):
    """Complete output written to stdout.

    The runner always outputs valid JSON matching this schema,
    even on errors.

    Attributes:
        success: Whether every operation ran and took effect
        results: Per-operation outcomes, in input order
        error: Error message (on failure)
        error_type: Error class name (on failure)
    """

    success: bool
    results: list[OperationResultSchema] = Field(default_factory=list)
    error: str = ""
    error_type: str = ""
