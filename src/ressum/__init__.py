"""
*ressum*

Well, group and field summary vectors from per-step well snapshots.
"""

from .constants import *  # noqa
from .types import *  # noqa
from .rates import *  # noqa
from .keywords import *  # noqa
from .evaluators import *  # noqa
from .accumulators import *  # noqa
from .aggregation import *  # noqa
from .config import *  # noqa
from .stores import *  # noqa
from .models import *  # noqa
from .tables import *  # noqa
from .engine import *  # noqa
from .errors import (  # noqa
    RessumError,
    ValidationError,
    KeywordError,
    SummaryError,
    OrderingError,
    EngineStateError,
    SummaryKeyError,
    StorageError,
)

__version__ = "0.1.0"
