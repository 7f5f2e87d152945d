# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for applying settings operations from JSON.

Usage:
    python -m defaults_store.runner < input.json > output.json

Exports:
    Executor: Applies a batch of operations to a store
    RunnerInput: Input schema
    RunnerOutput: Output schema
"""

from .executor import ExecutionError, Executor
from .schema import (
    OperationResultSchema,
    OperationSchema,
    RunnerInput,
    RunnerOutput,
)

__all__ = [
    "ExecutionError",
    "Executor",
    "OperationResultSchema",
    "OperationSchema",
    "RunnerInput",
    "RunnerOutput",
]
