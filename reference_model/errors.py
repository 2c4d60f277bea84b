"""Exceptions raised while transforming a reference model workbook."""


class ReferenceModelError(Exception):
    """Base class for every fatal transformation failure."""


class ConfigurationError(ReferenceModelError):
    pass


class WorkbookError(ReferenceModelError):
    pass


class HeaderLengthError(ReferenceModelError):
    pass


class RowLengthError(ReferenceModelError):
    pass


class GlossaryContinuationError(ReferenceModelError):
    pass


class EmbeddingError(ReferenceModelError):
    pass


class EncodingError(ReferenceModelError):
    pass
