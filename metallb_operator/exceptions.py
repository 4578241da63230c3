"""
This module implements custom exceptions
"""

## Base Error ##################################################################


class MetalLBOperatorError(Exception):
    """Base class for all metallb_operator exceptions"""

    def __init__(self, message: str, is_fatal_error: bool):
        """Construct with a flag indicating whether this is a fatal error. This
        will be a static property of all children.
        """
        super().__init__(message)
        self._is_fatal_error = is_fatal_error

    @property
    def is_fatal_error(self):
        """Property indicating whether or not this error should abort the
        reconciliation pass without expecting the next pass to fare better
        """
        return self._is_fatal_error


## Fatal Errors ################################################################


class MetalLBOperatorFatalError(MetalLBOperatorError):
    """A fatal error indicates an unexpected failure during a reconciliation
    pass. The invoking control loop may still retry with backoff.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=True)


class ConfigError(MetalLBOperatorFatalError):
    """Exception caused by invalid operator configuration"""


class MissingConfigurationError(ConfigError):
    """A required environment input is absent"""

    def __init__(self, variable: str, message: str = ""):
        self.variable = variable
        super().__init__(message or f"{variable} env variable must be set")


class ParseError(ConfigError):
    """A value could not be parsed into the expected shape"""

    def __init__(self, message: str = "", value=None):
        self.value = value
        super().__init__(message)


class RenderError(ParseError):
    """The template package could not be executed or its output could not be
    parsed into objects
    """


class PatchError(MetalLBOperatorFatalError):
    """A rendered object is missing a field the structural patcher must
    mutate. This means the chart and the patcher have drifted apart.
    """


class ClusterError(MetalLBOperatorFatalError):
    """Exception caused when a cluster operation fails in an unexpected way"""


class StoreError(ClusterError):
    """A store call (list/get/create/update) failed"""


## Expected Errors #############################################################


class MetalLBOperatorExpectedError(MetalLBOperatorError):
    """An expected error terminates the current pass but is expected to
    resolve in a subsequent one
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=False)


class CancelledError(MetalLBOperatorExpectedError):
    """The reconciliation context was cancelled before a store call"""


## Assertions ##################################################################


def assert_config(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a ConfigError"""
    if not condition:
        raise ConfigError(message)


def assert_cluster(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a StoreError. This should be
    used when an operation against the cluster must succeed.
    """
    if not condition:
        raise StoreError(message)


def assert_patch(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a PatchError"""
    if not condition:
        raise PatchError(message)
