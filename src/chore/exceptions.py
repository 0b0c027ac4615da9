# chore/exceptions.py
"""
Custom exception hierarchy for chore.

All chore-specific exceptions inherit from ChoreError. Two branches let
callers tell configuration-time failures (raised while loading the file or
building a plan, before any command runs) from execution-time failures
(raised while commands run).
"""

from __future__ import annotations


class ChoreError(Exception):
    """
    Base exception for all chore errors.

    Catch this to handle any chore-specific error.
    """

    pass


# ─────────────────────────────────────────────────────────────────────────────
# Configuration-time errors
# ─────────────────────────────────────────────────────────────────────────────
class ConfigValidationError(ChoreError):
    """
    Raised when the configuration or a requested plan is invalid.

    Nothing has been executed when this is raised.
    """

    pass


class ConfigParseError(ConfigValidationError):
    """
    Raised when configuration data is malformed.

    Examples: invalid YAML/TOML syntax, a list where a mapping is expected,
    a key that is not a plain string, an unknown field.
    """

    pass


class DuplicateNameError(ConfigValidationError):
    """
    Raised when a task or option name is declared twice in one scope.

    Attributes:
        kind: "task" or "option"
        name: The duplicated name
    """

    def __init__(self, kind: str, name: str, scope: str | None = None):
        self.kind = kind
        self.name = name
        self.scope = scope
        where = f" in {scope}" if scope else ""
        super().__init__(f"{kind} '{name}' is declared more than once{where}")


class TaskNotFoundError(ConfigValidationError):
    """
    Raised when a task name does not exist in the configuration.

    Example:
        >>> build_plan(config, "deploy")
        TaskNotFoundError: unknown task 'deploy'
    """

    def __init__(self, name: str, known: list[str] | None = None):
        self.name = name
        self.known = known or []
        msg = f"unknown task '{name}'"
        if self.known:
            msg += f" (available: {', '.join(self.known)})"
        super().__init__(msg)


class DependencyCycleError(ConfigValidationError):
    """
    Raised when pre/post dependencies form a cycle.

    Attributes:
        task_name: The task that was reached while still being expanded
        cycle_path: Ordered list of tasks forming the cycle, ending with task_name
    """

    def __init__(self, task_name: str, cycle_path: list[str]):
        self.task_name = task_name
        self.cycle_path = cycle_path
        super().__init__(f"dependency cycle detected: {' -> '.join(cycle_path)}")


class OptionReferenceError(ConfigValidationError):
    """
    Raised when an option default references itself or a later option.
    """

    def __init__(self, option_name: str, reference: str, scope: str):
        self.option_name = option_name
        self.reference = reference
        self.scope = scope
        if option_name == reference:
            detail = "references itself"
        else:
            detail = f"references '{reference}', which is not declared before it"
        super().__init__(f"option '{option_name}' in {scope} {detail}")


class InterpolationError(ConfigValidationError):
    """
    Raised when a placeholder cannot be resolved.

    Attributes:
        task_name: Task whose text contained the placeholder (None for globals)
        placeholder: The unresolved placeholder name
    """

    def __init__(self, placeholder: str, task_name: str | None = None, text: str | None = None):
        self.placeholder = placeholder
        self.task_name = task_name
        self.text = text
        where = f"task '{task_name}'" if task_name else "global options"
        super().__init__(f"unresolved placeholder '${{{placeholder}}}' in {where}")


class OptionValueError(ConfigValidationError):
    """
    Raised when an option value is missing, unknown or of the wrong type.
    """

    pass


# ─────────────────────────────────────────────────────────────────────────────
# Execution-time errors
# ─────────────────────────────────────────────────────────────────────────────
class ExecutionError(ChoreError):
    """
    Raised when running a plan fails.

    These are normal command failures, not configuration problems.
    """

    pass


class CommandFailedError(ExecutionError):
    """
    Raised when a shell command exits non-zero or cannot be started.

    The message is the process exit description, e.g. "exit status 1".

    Attributes:
        returncode: Exit status of the child, or None if it never started
    """

    def __init__(self, message: str, returncode: int | None = None):
        self.returncode = returncode
        super().__init__(message)


class TaskFailedError(ExecutionError):
    """
    Raised by the execution engine when a task instance fails.

    The message is the underlying error's text so that the terminal error of
    an invocation reads the same as the command failure that caused it.

    Attributes:
        task_name: Name of the failed task
        error: The underlying CommandFailedError
    """

    def __init__(self, task_name: str, error: Exception):
        self.task_name = task_name
        self.error = error
        super().__init__(str(error))

    @property
    def returncode(self) -> int | None:
        return getattr(self.error, "returncode", None)
