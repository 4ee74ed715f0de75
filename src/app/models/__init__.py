# app/models/__init__.py

from .identity import (
    Profile,
    PlanTier
)
from .credential import (
    VerifiedApiKey,
    ServiceName,
    CredentialStatus
)
from .usage import (
    ApiUsage
)
