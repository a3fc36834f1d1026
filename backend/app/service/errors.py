class ImagePipelineError(Exception):
  """Base class for failures raised while serving or storing images."""


class MalformedSizeSpec(ImagePipelineError):
  """The size segment of a request path does not follow `<W><z|x><H>`."""


class DecodeError(ImagePipelineError):
  """Image bytes are corrupt or not JPEG, PNG or GIF."""


class NotFound(ImagePipelineError):
  """No asset exists for the requested identifier."""


class ClientInputError(ImagePipelineError):
  """The request itself is unusable (missing file, empty upload path)."""


class StoreError(ImagePipelineError):
  """The persistent asset store failed to read or write."""


class CacheWriteError(ImagePipelineError):
  """A rendered variant could not be written to the cache."""
