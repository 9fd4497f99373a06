from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import List, Dict, Any, Mapping, Optional, Tuple
from pathlib import Path
from .exceptions import ConfigurationException, ProviderException

@dataclass(frozen=True)
class Provider:
    key: str
    name: str
    exe: str

    @property
    def installed(self) -> bool:
        return Path(self.exe).is_file()


@dataclass(frozen=True)
class RunConfig:
    provider: str = ""
    passes: int = 1
    probe_timeout: float = 2.0
    warmup_delay: float = 1.0
    executables: Mapping[str, str] = field(default_factory=dict)
    provider_names: Mapping[str, str] = field(default_factory=dict)
    skip_auto_isp_gcs: bool = False
    skip_auto_tls12_breakage_test: bool = True
    output_most_successful_separately: bool = False
    most_successful_file: str = "MostSuccessfulStrategies.txt"
    checklist_folder: str = "CheckLists"
    strategies_folder: str = "Strategies"
    logs_folder: str = "Logs"
    tls12_test_url: str = "https://tls-v1-2.badssl.com:1012"
    report_mapping_urls: Tuple[str, ...] = ()
    user_agent: Optional[str] = None

    def __post_init__(self):
        # copied into read-only views
        object.__setattr__(self, "executables", MappingProxyType(dict(self.executables)))
        object.__setattr__(self, "provider_names", MappingProxyType(dict(self.provider_names)))
        object.__setattr__(self, "report_mapping_urls", tuple(self.report_mapping_urls))

    def normalized(self) -> "RunConfig":
        """Copy with passes clamped to at least one."""
        if self.passes < 1:
            return replace(self, passes=1)
        return self

    def validate(self):
        errors = []

        if not (0 < self.probe_timeout <= 300):
            errors.append("Probe timeout must be between 0 and 300 seconds")

        if self.warmup_delay < 0:
            errors.append("Warm-up delay must not be negative")

        for k, v in self.executables.items():
            if not k or not v:
                errors.append(f"Invalid executable entry: {k}={v}")

        if self.output_most_successful_separately and not self.most_successful_file:
            errors.append("Most successful strategies file name is empty")

        if errors:
            raise ConfigurationException(
                "Configuration validation failed",
                context={"errors": errors, "config": self.to_dict()},
            )

    def resolve_provider(self, provider_id: Optional[str] = None) -> Provider:
        key = self.provider if provider_id is None else provider_id
        exe = self.executables.get(key)
        if not exe:
            raise ProviderException(f"Unknown provider: {key}", provider=key)
        return Provider(key=key, name=self.provider_names.get(key, key), exe=exe)

    def available_providers(self) -> List[Provider]:
        out = []
        for key in self.executables:
            p = self.resolve_provider(key)
            if p.installed:
                out.append(p)
        return out

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "provider": self.provider,
            "passes": self.passes,
            "probe_timeout": self.probe_timeout,
            "warmup_delay": self.warmup_delay,
            "executables": dict(self.executables),
            "skip_auto_isp_gcs": self.skip_auto_isp_gcs,
            "skip_auto_tls12_breakage_test": self.skip_auto_tls12_breakage_test,
            "output_most_successful_separately": self.output_most_successful_separately,
            "most_successful_file": self.most_successful_file,
            "checklist_folder": self.checklist_folder,
            "strategies_folder": self.strategies_folder,
            "logs_folder": self.logs_folder,
            "tls12_test_url": self.tls12_test_url,
            "report_mapping_urls": list(self.report_mapping_urls),
        }
