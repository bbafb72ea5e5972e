"""Exception hierarchy for the diagnosis workflow."""


class CornDiagnosisError(Exception):
    """Base class for every error raised by this package."""


class NotAnImageError(CornDiagnosisError):
    """The declared media type of a selected file is not an image."""

    def __init__(self, media_type: str) -> None:
        self.media_type = media_type
        super().__init__(
            "Por favor selecciona un archivo de imagen válido (JPG, PNG, JPEG)."
        )


class StorageError(CornDiagnosisError):
    """The persisted key-value store could not be used."""


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass
