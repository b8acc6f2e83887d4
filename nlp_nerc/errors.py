"""
Exceptions shared by the training and evaluation code.

- ConfigurationError  : bad parameters file values, detected before any I/O
- CorpusReadError     : corpus file unreadable or malformed
- LengthMismatchError : parallel corpora with different sample counts
- TrainingFailure     : the tagger backend failed to fit a model
- ModelError          : a trained model could not be loaded or returned invalid spans
"""


class NercError(Exception):
    """Base class for every error raised by nlp_nerc."""


class ConfigurationError(NercError, ValueError):
    """Invalid or missing configuration value."""


class CorpusReadError(NercError, IOError):
    """Corpus source could not be read or contains a malformed sample."""


class LengthMismatchError(NercError, ValueError):
    """Reference and prediction corpora do not have the same number of samples."""


class TrainingFailure(NercError, RuntimeError):
    """The tagger backend failed while training a model."""


class ModelError(NercError, RuntimeError):
    """A trained model could not be loaded or produced unusable output."""
