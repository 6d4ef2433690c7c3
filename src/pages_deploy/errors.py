from __future__ import annotations


class DeployError(RuntimeError):
    """Base class for failures raised by the deploy pipeline."""


class ConfigError(DeployError):
    pass


class StepFailed(DeployError):
    def __init__(self, step: str, returncode: int) -> None:
        super().__init__(f"step {step!r} failed with exit code {returncode}")
        self.step = step
        self.returncode = returncode


class VerifyError(DeployError):
    pass
