class ConverterError(Exception):
    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.args[0]} (caused by: {self.cause})"
        return str(self.args[0])


class ConfigurationError(ConverterError):
    pass


class ParsingError(ConverterError):
    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        line: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.file_path = file_path
        self.line = line


class EditConflictError(ConverterError):
    """Two text edits against the same snapshot overlap."""


class ModuleResolutionError(ConverterError):
    def __init__(
        self,
        message: str,
        specifier: str | None = None,
        importer: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.specifier = specifier
        self.importer = importer


class ReferenceResolutionError(ConverterError):
    """Call sites of a single callable could not be determined."""


class HierarchyCycleError(ConverterError):
    def __init__(self, message: str, cycle: list[str] | None = None):
        super().__init__(message)
        self.cycle = cycle or []


class MissingSuperclassError(ConverterError):
    def __init__(
        self,
        message: str,
        missing_path: str | None = None,
        subclass_id: str | None = None,
        superclass_id: str | None = None,
    ):
        super().__init__(message)
        self.missing_path = missing_path
        self.subclass_id = subclass_id
        self.superclass_id = superclass_id


class AliasRewriteError(ConverterError):
    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        alias: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.file_path = file_path
        self.alias = alias


class ConversionError(ConverterError):
    def __init__(
        self,
        message: str,
        stage: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.stage = stage
