from .auth import ExtensionAuthenticator, decode_extension_header, encode_extension_header
from .errors import LibraryError
from .service import CORS_HEADERS, LibraryReply, handle_library_request

__all__ = [
    "CORS_HEADERS",
    "ExtensionAuthenticator",
    "LibraryError",
    "LibraryReply",
    "decode_extension_header",
    "encode_extension_header",
    "handle_library_request",
]
