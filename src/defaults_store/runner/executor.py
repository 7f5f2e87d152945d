# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for applying a batch of settings operations.

Orchestrates the full flow:
1. Create store from configuration
2. Build a DefaultsManager around it
3. Apply each operation in order
4. Return structured result
"""

from __future__ import annotations

import logging
from typing import Any

from defaults_store.accessor import CodableDefaults, Defaults
from defaults_store.bus import ChangeBus
from defaults_store.config import create_store
from defaults_store.exceptions import StoreConfigError, StoreError
from defaults_store.manager import DefaultsManager
from defaults_store.stores import Store

from .schema import OperationResultSchema, OperationSchema, RunnerInput, RunnerOutput

logger = logging.getLogger(__name__)

_ACCESSORS: dict[str, type[Defaults[Any]]] = {
    "primitive": Defaults,
    "structured": CodableDefaults,
}


class ExecutionError(Exception):
    """Raised when an operation is malformed."""

    pass


class Executor:
    """Applies runner operations to a settings store.

    The executor is designed for dependency injection to support testing.
    Pass a custom store to the constructor to override store creation.

    Example:
        executor = Executor()
        output = await executor.execute(input_data)

        # For testing with an in-memory store:
        executor = Executor(store=InMemoryStore())
    """

    def __init__(self, store: Store | None = None, bus: ChangeBus | None = None) -> None:
        """Initialize executor with optional injected store and bus.

        Args:
            store: Optional store to use instead of creating from config.
            bus: Optional change bus; a private one is used otherwise.
        """
        self._injected_store = store
        self._bus = bus or ChangeBus()

    async def execute(self, input_data: RunnerInput) -> RunnerOutput:
        """Apply every operation in *input_data*.

        Note:
            This method catches all exceptions and returns them as
            RunnerOutput errors, ensuring valid JSON is always returned.
        """
        try:
            return await self._execute_internal(input_data)
        except StoreConfigError as e:
            return RunnerOutput(success=False, error=str(e), error_type="StoreConfigError")
        except StoreError as e:
            return RunnerOutput(success=False, error=str(e), error_type="StoreError")
        except ExecutionError as e:
            return RunnerOutput(success=False, error=str(e), error_type="ExecutionError")
        except Exception as e:
            logger.exception("Runner failed")
            return RunnerOutput(success=False, error=str(e), error_type=type(e).__name__)

    async def _execute_internal(self, input_data: RunnerInput) -> RunnerOutput:
        """Internal execution logic.

        Separated from execute() to allow exception propagation
        for testing while execute() catches all errors.
        """
        store = self._injected_store or create_store(input_data.store)
        owns_store = self._injected_store is None

        try:
            manager = DefaultsManager(store=store, bus=self._bus)
            results = [await self._run_operation(manager, op) for op in input_data.operations]
            return RunnerOutput(success=all(r.ok for r in results), results=results)
        finally:
            if owns_store:
                await store.close()

    async def _run_operation(
        self, manager: DefaultsManager, operation: OperationSchema
    ) -> OperationResultSchema:
        """Run a single operation.

        Raises:
            ExecutionError: If a keyed operation has no key
        """
        accessor_cls = _ACCESSORS[operation.kind]
        result = OperationResultSchema(op=operation.op, kind=operation.kind)

        if operation.op == "remove_all":
            failed = await accessor_cls.remove_all(store=manager.store, bus=manager.bus)
            result.ok = not failed
            result.value = [str(k) for k in failed]
            return result

        if operation.key is None:
            raise ExecutionError(f"Operation '{operation.op}' requires a 'key'")
        result.key = str(operation.key)

        if operation.kind == "structured":
            accessor: Defaults[Any] = manager.codable(Any, operation.key)
        else:
            accessor = manager.defaults(operation.key)

        if operation.op == "get":
            result.value = await accessor.get()
        elif operation.op == "set":
            result.ok = await accessor.set(operation.value)
        else:
            result.ok = await accessor.remove()
        return result
