# -----------------------------------------------------------------------------
# BOOTSTRAP ERRORS
# -----------------------------------------------------------------------------
# Every failure in the pipeline is fatal. Each error names the stage it came
# from and, where one was involved, the external command (credentials
# already redacted) so the CLI can print a single precise diagnostic.
# -----------------------------------------------------------------------------


class BootstrapError(Exception):
    """
    Base class for all fatal bootstrap failures.

    Attributes:
        stage: Pipeline stage that failed (e.g. "fetch", "install")
        command: The external command that failed or was about to run
    """

    stage = "bootstrap"

    def __init__(self, message: str, command: str | None = None) -> None:
        super().__init__(message)
        self.command = command
