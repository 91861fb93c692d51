from .http.model import HTTPRequest, HTTPResponse  # NOQA: F401
from .errors import (  # NOQA: F401
	ShelfError,
	MalformedPath,
	ForbiddenPath,
	MethodNotAllowed,
	RenderError,
	ConfigurationError,
)
from .resolver import resolve, TargetFile, TargetDirectory, TargetMissing  # NOQA: F401
from .content import classify, ContentDecision  # NOQA: F401
from .service import FileService  # NOQA: F401
from .server import run  # NOQA: F401


# EOF
