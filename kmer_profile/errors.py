class KmerProfileError(Exception):
    """Base class for errors raised while building a k-mer profile."""


class FatalIOError(KmerProfileError):
    """A required file could not be read or written. The run cannot continue."""


class MalformedVocabularyEntry(KmerProfileError):
    """A vocabulary line that cannot be used as a k-mer."""

    def __init__(self, line_number: int, text: str, message: str):
        super().__init__(message)
        self.line_number = line_number
        self.text = text


class DegenerateNormalizationError(KmerProfileError):
    """No vocabulary k-mer was matched, so counts cannot be rescaled."""


class ConfigError(KmerProfileError):
    """The configuration file holds unknown keys or invalid values."""
