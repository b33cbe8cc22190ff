from .cache import ResponseCache
from .compression import SelectiveGZip
from .errors import UnhandledErrors
from .https_redirect import HTTPSRedirect

__all__ = ["HTTPSRedirect", "ResponseCache", "SelectiveGZip", "UnhandledErrors"]
