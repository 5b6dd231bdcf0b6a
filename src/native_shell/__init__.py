"""native-shell - run scripts and executables with bindings as environment variables."""

from .bindings import flatten_bindings, flatten_value, to_binding_value
from .engine import NativeShellEngine, publish_exit_code
from .errors import (
    BindingError,
    ConfigurationError,
    LaunchError,
    NativeShellError,
    ScriptExecutionError,
    TokenizeError,
)
from .shells import Bash, Cmd, Executable, NativeShell, create_shell
from .tokenizer import tokenize
from .types import (
    EXIT_VALUE_BINDING_NAME,
    RETURN_CODE_OK,
    VARIABLES_BINDING_NAME,
    ExecResult,
    Outcome,
    ScriptContext,
)

__version__ = "0.1.0"

__all__ = [
    "NativeShellEngine",
    "ScriptContext",
    "ExecResult",
    "Outcome",
    "NativeShell",
    "Bash",
    "Cmd",
    "Executable",
    "create_shell",
    "flatten_bindings",
    "flatten_value",
    "to_binding_value",
    "tokenize",
    "publish_exit_code",
    "EXIT_VALUE_BINDING_NAME",
    "VARIABLES_BINDING_NAME",
    "RETURN_CODE_OK",
    "NativeShellError",
    "ConfigurationError",
    "BindingError",
    "TokenizeError",
    "LaunchError",
    "ScriptExecutionError",
]
