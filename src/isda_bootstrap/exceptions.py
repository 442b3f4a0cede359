"""Exceptions raised by the ISDA bootstrap library."""


class CDSCalibrationError(Exception):
    """Base class for all library errors."""


class InvalidArgumentError(CDSCalibrationError, ValueError):
    """Null, empty, mismatched or out-of-range inputs."""


class InvalidScheduleError(InvalidArgumentError):
    """Date ordering or stub rules violated while building a schedule."""


class BracketingError(CDSCalibrationError):
    """No sign change found for a calibration node."""


class RootFinderNonConvergenceError(CDSCalibrationError):
    """The root finder exceeded its iteration budget."""


class IndexOutOfRangeError(CDSCalibrationError, IndexError):
    """Invalid node index on a curve update."""


class ConfigurationError(InvalidArgumentError):
    """Malformed calibration configuration."""
