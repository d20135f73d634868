"""Custom Exceptions for the FCPXSub application."""

class FCPXSubError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(FCPXSubError):
    """Exception raised for errors in configuration loading."""
    pass

class AudioExtractionError(FCPXSubError):
    """Exception raised for errors during audio extraction."""
    pass

class TranscriptionError(FCPXSubError):
    """Exception raised for errors during transcription."""
    pass

class FileSystemError(FCPXSubError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass

class StylePresetError(FCPXSubError):
    """Exception raised for invalid style preset operations."""
    pass

class TemplateError(FCPXSubError):
    """Base class for errors while extracting a title template."""
    pass

class TemplateFileNotFoundError(TemplateError, FileNotFoundError):
    """The template source file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"FCPXML template file not found: {path}")

class MalformedTemplateError(TemplateError):
    """The template source could not be parsed as XML."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = "Template file is not well-formed XML"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

class TemplateStructureError(TemplateError):
    """Well-formed XML that lacks an element every FCP export carries."""

    DESCRIPTIONS = {
        'effect': "No effect definition found under <resources>",
        'title': "No <title> element found in the document",
    }

    def __init__(self, missing: str):
        self.missing = missing
        description = self.DESCRIPTIONS.get(missing, f"Missing <{missing}> element")
        super().__init__(f"{description}; is this a Final Cut Pro export?")
