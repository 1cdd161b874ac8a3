class MigratorError(Exception):
    """Base class for errors that abort a run with a dedicated exit code."""

    exit_code = 1
    message = "unexpected error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NoInputFilesError(MigratorError):
    exit_code = 1
    message = "strings files not found."


class CatalogNotFoundError(MigratorError):
    exit_code = 2
    message = "xcstrings file not found."


class CatalogCorruptError(MigratorError):
    exit_code = 3
    message = "xcstrings file is broken."


class ExportFailedError(MigratorError):
    EXIT_CODES = {"xcstrings": 4, "strings": 5, "stringsdict": 6}

    def __init__(self, artifact: str) -> None:
        if artifact not in self.EXIT_CODES:
            raise ValueError(f"Unknown export artifact: {artifact}")
        self.artifact = artifact
        super().__init__(f"failed to export {artifact} file.")

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.EXIT_CODES[self.artifact]


class ConfigurationError(MigratorError):
    exit_code = 7
    message = "invalid configuration file."


class DecodeError(Exception):
    """Raised by the legacy file decoders; never fatal to a run."""
