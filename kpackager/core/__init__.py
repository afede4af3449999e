"""kpackager Core - Shared constants and input validation.

Import specific names from submodules:
    from kpackager.core.constants import ErrorCode
    from kpackager.core.validators import validate_config
"""

from kpackager.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
