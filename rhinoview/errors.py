"""Exception types raised across the viewer pipeline."""


class RhinoViewError(Exception):
    """Base class for all rhinoview errors."""


class ServiceUnavailableError(RhinoViewError):
    """The compute service could not be reached or did not answer in time.

    Recoverable: callers are expected to report it and re-enable input.
    """


class ComputeRequestError(RhinoViewError):
    """The compute service rejected the request or returned malformed data."""


class NoGeometryDecodedError(RhinoViewError):
    """A full materialization pass produced zero decodable geometry objects."""


class DocumentReleasedError(RhinoViewError):
    """A scene document was used after it was released."""
