# line_pad/__init__.py

__version__ = "0.1.0"

from .document import Document, Position, describe_os_error
from .filetype import FileType, HighlightingOptions, load_file_types
from .highlighting import ColorScheme, HighlightType
from .row import Row, SearchDirection
from .config import load_config, setup_logging, deep_merge

# Optional: Expose key components through package level imports
__all__ = [
    'Document',
    'Position',
    'describe_os_error',
    'FileType',
    'HighlightingOptions',
    'load_file_types',
    'ColorScheme',
    'HighlightType',
    'Row',
    'SearchDirection',
    'load_config',
    'setup_logging',
    'deep_merge',
]
