import os
from typing import Dict, Any

__version__ = "1.3.1"

DEFAULT_CONFIG = {
    'passes': 1,
    'probe_timeout': 2.0,
    'warmup_delay': 1.0,
    'skip_auto_isp_gcs': False,
    'skip_auto_tls12_breakage_test': True,
    'output_most_successful_separately': False,
    'most_successful_file': 'MostSuccessfulStrategies.txt',
    'checklist_folder': 'CheckLists',
    'strategies_folder': 'Strategies',
    'logs_folder': 'Logs',
    'log_file_prefix': 'availability_check_',
    'log_timestamp_format': '%Y-%m-%d_%H-%M-%S',
    'tls12_test_url': 'https://tls-v1-2.badssl.com:1012',
    'report_mapping_urls': [
        'https://redirector.gvt1.com/report_mapping?di=no',
        'https://redirector.googlevideo.com/report_mapping?di=no',
    ],
    'user_agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36',
}

# Order matters: interactive selection numbers providers in this order.
PROVIDERS = {
    'gdpi': {'name': 'GoodbyeDPI', 'exe': 'goodbyedpi.exe'},
    'zapret': {'name': 'Zapret', 'exe': r'C:\zapret-discord-youtube-1.6.2\bin\winws.exe'},
    'cia': {'name': 'ByeDPI', 'exe': 'ciadpi.exe'},
}

HTTP_CONFIG = {
    'codename_timeout': 5.0,
    'pool_connections': 16,
    'pool_maxsize': 64,
    'blocked_status': 403,
}

GCS_CONFIG = {
    'source_alphabet': "u z p k f a 5 0 v q l g b 6 1 w r m h c 7 2 x s n i d 8 3 y t o j e 9 4 -".split(" "),
    'target_alphabet': "0 1 2 3 4 5 6 7 8 9 a b c d e f g h i j k l m n o p q r s t u v w x y z -".split(" "),
    'url_prefix': 'https://rr1---sn-',
    'url_suffix': '.googlevideo.com',
}

EXIT_CODES = {
    'SUCCESS': 0,
    'USAGE_ERROR': 1,
    'INPUT_ERROR': 2,
    'CONFIG_ERROR': 3,
    'UNKNOWN_ERROR': 255
}

ENV_VARS = {
    'GOODCHECK_LOG_LEVEL': 'log_level',
    'GOODCHECK_GDPI_EXE': 'gdpi',
    'GOODCHECK_ZAPRET_EXE': 'zapret',
    'GOODCHECK_CIA_EXE': 'cia',
}

def get_version() -> str:
    return __version__

def get_default_executables() -> Dict[str, str]:
    """Provider id -> executable path, with GOODCHECK_<ID>_EXE overrides applied."""
    exes = {pid: p['exe'] for pid, p in PROVIDERS.items()}
    for env_name, pid in ENV_VARS.items():
        if pid in exes and os.getenv(env_name):
            exes[pid] = os.environ[env_name]
    return exes

def get_env_log_level(default: str = "INFO") -> str:
    return os.getenv('GOODCHECK_LOG_LEVEL', default)

def get_defaults() -> Dict[str, Any]:
    d = dict(DEFAULT_CONFIG)
    d['report_mapping_urls'] = list(DEFAULT_CONFIG['report_mapping_urls'])
    return d
