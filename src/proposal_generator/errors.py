"""Exception types raised by the proposal generation pipeline."""


class ProposalGeneratorError(Exception):
    """Base class for all proposal generator errors."""


class ConfigurationError(ProposalGeneratorError):
    """Settings could not be loaded or are invalid."""


class NoCredentialsConfigured(ProposalGeneratorError):
    """The key pool has no API keys to hand out."""


class ModelServiceError(ProposalGeneratorError):
    """A call to the language model failed."""


class QuotaExceeded(ModelServiceError):
    """The current API key ran out of quota or hit a rate limit."""


class CollaboratorReadError(ProposalGeneratorError):
    """The record store could not be read."""


class StoreStructureError(CollaboratorReadError):
    """The record store returned data in an unexpected shape."""


class GenerationFailed(ProposalGeneratorError):
    """The cover letter could not be generated."""


class RevisionFailed(ProposalGeneratorError):
    """The cover letter could not be revised."""


class RunCancelled(ProposalGeneratorError):
    """The caller abandoned the run before it finished."""
