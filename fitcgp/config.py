# fitcgp/config.py
import os
import logging

# Read version from VERSION file
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(os.path.abspath(_version_file), "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"

_SUPPORTED_BACKENDS = ("numpy",)


class _FITCConfig:
    def __init__(self):
        self.version = __version__
        self.backend = None
        self.seed = 1234
        self.caches = {}
        # logger lives in config
        self.logger = logging.getLogger("fitcgp")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.INFO)

    def __str__(self):
        return (
            f"FITCConfig("
            f"version={self.version}, "
            f"backend={self.backend}, "
            f"seed={self.seed}, "
            f"caches={list(self.caches.keys())})"
        )

    def __repr__(self):
        return (
            f"<FITCConfig "
            f"version={self.version!r}, "
            f"backend={self.backend!r}, "
            f"seed={self.seed!r}, "
            f"caches={list(self.caches.keys())}>"
        )

    def update(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        return self

    def clear_caches(self, name=None):
        if name is None:
            self.caches.clear()
        else:
            self.caches.pop(name, None)


_config = _FITCConfig()


def get_config():
    return _config


def _detect_backend():
    env = os.environ.get("FITCGP_BACKEND")
    if env is None:
        return "numpy"
    return env


def init_backend():
    """Idempotent. Detect and store backend, set env for downstream imports."""
    if _config.backend is None:
        backend = _detect_backend()
        _config.backend = backend
        os.environ["FITCGP_BACKEND"] = backend
    return _config.backend


def set_backend(backend: str):
    """Force a backend before importing fitcgp.num."""
    if backend not in _SUPPORTED_BACKENDS:
        raise ValueError(f"backend must be one of {_SUPPORTED_BACKENDS}")
    _config.backend = backend
    os.environ["FITCGP_BACKEND"] = backend


def get_backend():
    """Return current backend; triggers detection if not set."""
    return _config.backend or init_backend()


def clear_caches(name=None):
    _config.clear_caches(name)


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
