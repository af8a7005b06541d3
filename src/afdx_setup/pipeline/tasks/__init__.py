"""Pipeline task implementations.

Provides concrete task types:

- ShellCommandTask: Execute a command through the shell
- FunctionTask: Call a Python function with the shared context
"""

from afdx_setup.pipeline.tasks.function import FunctionTask
from afdx_setup.pipeline.tasks.shell import ShellCommandTask

__all__ = [
    "FunctionTask",
    "ShellCommandTask",
]
