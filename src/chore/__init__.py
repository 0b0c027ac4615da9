__version__ = "0.1.0"

from .command import Command, CommandList, get_shell, parse_command_list
from .condition import ConditionContext, RunCondition
from .config import Config, parse_config
from .exceptions import (
    ChoreError,
    CommandFailedError,
    ConfigParseError,
    ConfigValidationError,
    DependencyCycleError,
    DuplicateNameError,
    ExecutionError,
    InterpolationError,
    OptionReferenceError,
    OptionValueError,
    TaskFailedError,
    TaskNotFoundError,
)
from .executor import CommandExecutor
from .load_config import find_config, load_config
from .logging_config import disable_logging, get_log_file_path, setup_logging
from .option import Option
from .ordered_map import MapSlice, parse_ordered_map
from .plan import Plan, TaskInstance, build_plan
from .run_result import InstanceResult, InstanceState
from .runner import TaskRunner, run_task
from .task import Dependency, Task
from .ui import UI, Verbosity

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Command",
    "CommandList",
    "Config",
    "ConditionContext",
    "Dependency",
    "MapSlice",
    "Option",
    "RunCondition",
    "Task",
    "find_config",
    "get_shell",
    "load_config",
    "parse_command_list",
    "parse_config",
    "parse_ordered_map",
    # Planning & execution
    "CommandExecutor",
    "InstanceResult",
    "InstanceState",
    "Plan",
    "TaskInstance",
    "TaskRunner",
    "build_plan",
    "run_task",
    # Output & logging
    "UI",
    "Verbosity",
    "disable_logging",
    "get_log_file_path",
    "setup_logging",
    # Exceptions
    "ChoreError",
    "CommandFailedError",
    "ConfigParseError",
    "ConfigValidationError",
    "DependencyCycleError",
    "DuplicateNameError",
    "ExecutionError",
    "InterpolationError",
    "OptionReferenceError",
    "OptionValueError",
    "TaskFailedError",
    "TaskNotFoundError",
]
