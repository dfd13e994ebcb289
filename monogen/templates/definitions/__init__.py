"""Built-in template definitions, grouped by library type."""

from .contract import CONTRACT_ERRORS, CONTRACT_RPC_DEFINITIONS
from .data_access import DATA_ACCESS_ERRORS, DATA_ACCESS_LAYERS
from .feature import FEATURE_ERRORS, FEATURE_LAYERS, FEATURE_SERVICE
from .infra import INFRA_ERRORS, INFRA_SERVICE
from .provider import PROVIDER_ERRORS, PROVIDER_SERVICE

# (definition, description) in registration order
BUILTIN_DEFINITIONS = (
    (CONTRACT_ERRORS, "Domain and repository errors of a contract library"),
    (CONTRACT_RPC_DEFINITIONS, "Schemas and route-tagged RPC definitions of a contract library"),
    (DATA_ACCESS_ERRORS, "Infrastructure errors of a data-access library"),
    (DATA_ACCESS_LAYERS, "Live, Dev, Test and Auto layers of a data-access library"),
    (FEATURE_ERRORS, "Service-level errors of a feature library"),
    (FEATURE_SERVICE, "Context.Tag service orchestrating the repository of a feature"),
    (FEATURE_LAYERS, "Live, Dev, Test and Auto layers of a feature library"),
    (INFRA_SERVICE, "Context.Tag service with Live, Test and Dev layers"),
    (INFRA_ERRORS, "Error family of an infrastructure service"),
    (PROVIDER_ERRORS, "Error family of an external service provider"),
    (PROVIDER_SERVICE, "Context.Tag adapter for an external service with Live and Test layers"),
)

__all__ = [
    "BUILTIN_DEFINITIONS",
    "CONTRACT_ERRORS",
    "CONTRACT_RPC_DEFINITIONS",
    "DATA_ACCESS_ERRORS",
    "DATA_ACCESS_LAYERS",
    "FEATURE_ERRORS",
    "FEATURE_LAYERS",
    "FEATURE_SERVICE",
    "INFRA_ERRORS",
    "INFRA_SERVICE",
    "PROVIDER_ERRORS",
    "PROVIDER_SERVICE",
]
