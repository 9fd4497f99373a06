from typing import Any, Dict, Optional

class GoodCheckException(Exception):
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        context_str = f" - Context: {self.context}" if self.context else ""
        return f"{self.__class__.__name__}: {self.message}{context_str}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


class NetworkException(GoodCheckException):
    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if url:
            ctx["url"] = url
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message, ctx)


class ConfigurationException(GoodCheckException):

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if config_key:
            ctx["config_key"] = config_key
        if config_value is not None:
            ctx["config_value"] = config_value
        super().__init__(message, ctx)


class ProviderException(ConfigurationException):
    """Provider identifier has no configured executable"""

    def __init__(self, message: str, provider: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, config_key="provider", config_value=provider, context=context)


class ProcessException(GoodCheckException):
    def __init__(
        self,
        message: str,
        executable: Optional[str] = None,
        strategy: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if executable:
            ctx["executable"] = executable
        if strategy is not None:
            ctx["strategy"] = strategy
        super().__init__(message, ctx)


class InputException(GoodCheckException):
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        super().__init__(message, ctx)


class OutputException(GoodCheckException):
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        super().__init__(message, ctx)
