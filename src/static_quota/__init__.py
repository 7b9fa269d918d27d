"""static_quota package: app/core/infra/config/shared.

Expose the broker quota callback at the package level.
"""

from .app.callback import StaticQuotaCallback
from .config.settings import QuotaSettings
from .core.domain.enums import QuotaType

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "StaticQuotaCallback",
    "QuotaSettings",
    "QuotaType",
]
