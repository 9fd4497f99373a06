from .target import RunConfig, Provider
from .result import ProbeResult, StrategyResult, ResultTable, RunSummary
from .exceptions import (
    GoodCheckException,
    NetworkException,
    ConfigurationException,
    ProviderException,
    ProcessException,
    InputException,
    OutputException,
)

__all__ = [
    "RunConfig",
    "Provider",
    "ProbeResult",
    "StrategyResult",
    "ResultTable",
    "RunSummary",
    "GoodCheckException",
    "NetworkException",
    "ConfigurationException",
    "ProviderException",
    "ProcessException",
    "InputException",
    "OutputException",
]
