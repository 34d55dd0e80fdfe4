"""Custom exception types for the provisioning workflow."""


class ProvisionerError(RuntimeError):
    """Base class for provisioning-related failures."""


class UsageError(ProvisionerError):
    """Raised when command line arguments are invalid."""


class ConfigError(ProvisionerError):
    """Raised when the provisioner configuration cannot be loaded."""


class ClusterLoginError(ProvisionerError):
    """Raised when the cluster session is missing or belongs to the wrong user."""


class ScriptNotFoundError(ProvisionerError):
    """Raised when a provisioning script is missing from the scripts directory."""


class ScriptFailedError(ProvisionerError):
    """Raised when a provisioning script exits with a non-zero status."""


class VerificationError(ProvisionerError):
    """Raised when deployments are not created or never become available."""
