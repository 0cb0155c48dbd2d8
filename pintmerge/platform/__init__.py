"""Platform helpers (subprocess execution)."""

from .process import ProcessError, ProcessOutput, run_output

__all__ = ["ProcessError", "ProcessOutput", "run_output"]
