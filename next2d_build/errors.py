from typing import Optional, Sequence


class Next2DBuildError(Exception):
    """Base error for every failure that ends a build invocation."""


class UsageError(Next2DBuildError):
    pass


class ConfigMissingError(Next2DBuildError):
    pass


class ToolchainError(Next2DBuildError):
    pass


class SubprocessFailure(Next2DBuildError):
    def __init__(self, step: str, returncode: int, command: Optional[Sequence[str]] = None) -> None:
        self.step = step
        self.returncode = returncode
        self.command = list(command or [])
        super().__init__(f"{step} exited with code {returncode}")


class PackagingFailure(SubprocessFailure):
    pass
