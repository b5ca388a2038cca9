# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for executing store operations from JSON.

Usage:
    python -m kvl.runner < input.json > output.json

Exports:
    Executor: Runs operations against a store
    RunnerInput: Input schema read from stdin
    RunnerOutput: Output schema written to stdout
"""

from .executor import ExecutionError, Executor, KeyCodec
from .schema import (
    EntrySchema,
    OperationResult,
    OperationSchema,
    RunnerInput,
    RunnerOutput,
)

__all__ = [
    "EntrySchema",
    "ExecutionError",
    "Executor",
    "KeyCodec",
    "OperationResult",
    "OperationSchema",
    "RunnerInput",
    "RunnerOutput",
]
