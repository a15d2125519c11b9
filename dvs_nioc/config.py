import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import yaml

logger = logging.getLogger(__name__)


def _normalize_vcenter_host(host: str) -> str:
    """Accept 'vc.example.com' as well as 'https://vc.example.com/' and return the bare host."""
    h = host.strip()
    if "://" in h:
        h = urlparse(h).netloc
    h = h.split("/", 1)[0].strip()
    if not h:
        raise RuntimeError(f"vCenter host is empty: {host!r}. Use e.g. vcenter.example.com")
    return h


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "no", "n", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}={raw!r} (expected true/false).")


def _parse_port(raw: object, source: str) -> int:
    try:
        port = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"{source} must be an integer port number") from exc
    if not 0 < port < 65536:
        raise RuntimeError(f"{source} out of range: {port}")
    return port


@dataclass
class Settings:
    vcenter_host: str
    vcenter_username: str
    vcenter_password: str
    vcenter_port: int = 443
    verify_ssl: bool = True
    log_level: str = "INFO"
    log_dir: Optional[Path] = None


def _read_secret_file(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    p = Path(path)
    if not p.is_file():
        logger.warning("Secret file %s does not exist", p)
        return None
    return p.read_text(encoding="utf-8").strip()


def _load_settings_from_yaml(path: str) -> Settings:
    """Load settings from a single YAML config file."""
    p = Path(path)
    if not p.is_file():
        raise RuntimeError(f"APP_CONFIG_FILE not found: {path}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except Exception as exc:
        raise RuntimeError(f"Failed to read YAML config: {path}") from exc

    if not isinstance(raw, dict):
        raise RuntimeError("YAML config root must be a mapping/object")

    # vCenter connection
    vcenter = raw.get("vcenter") or {}
    if not isinstance(vcenter, dict):
        raise RuntimeError("vcenter must be a mapping/object")

    host = vcenter.get("host")
    if not isinstance(host, str) or not host.strip():
        raise RuntimeError("vcenter.host is required")
    host = _normalize_vcenter_host(host)

    port = _parse_port(vcenter.get("port", 443), "vcenter.port")

    username = vcenter.get("username")
    if not isinstance(username, str) or not username.strip():
        raise RuntimeError("vcenter.username is required")

    password: Optional[str] = None
    if isinstance(vcenter.get("password"), str) and vcenter["password"]:
        password = vcenter["password"]
    elif isinstance(vcenter.get("password_file"), str) and vcenter["password_file"].strip():
        password = _read_secret_file(vcenter["password_file"].strip())
    if not password:
        raise RuntimeError("vcenter.password (or vcenter.password_file) is required")

    verify_ssl = vcenter.get("verify_ssl", True)
    if not isinstance(verify_ssl, bool):
        raise RuntimeError("vcenter.verify_ssl must be boolean")

    # Runtime config
    runtime = raw.get("runtime") or {}
    if not isinstance(runtime, dict):
        raise RuntimeError("runtime must be a mapping/object")

    log_level = str(runtime.get("log_level", "INFO"))
    log_dir_raw = runtime.get("log_dir")
    if log_dir_raw is not None and not isinstance(log_dir_raw, str):
        raise RuntimeError("runtime.log_dir must be a string or null")

    return Settings(
        vcenter_host=host,
        vcenter_username=username.strip(),
        vcenter_password=password,
        vcenter_port=port,
        verify_ssl=verify_ssl,
        log_level=log_level,
        log_dir=Path(log_dir_raw) if log_dir_raw and log_dir_raw.strip() else None,
    )


def load_settings(config_file: Optional[str] = None) -> Settings:
    """Load settings from a YAML file (argument or APP_CONFIG_FILE) or from VCENTER_* environment variables."""

    # YAML-first mode (single source of truth)
    app_config_file = config_file or os.getenv("APP_CONFIG_FILE")
    if app_config_file:
        return _load_settings_from_yaml(app_config_file)

    # Environment mode
    host = os.getenv("VCENTER_HOST")
    if not host:
        raise RuntimeError(
            "VCENTER_HOST not set. Set APP_CONFIG_FILE to a YAML config or export "
            "VCENTER_HOST, VCENTER_USER and VCENTER_PASSWORD (or VCENTER_PASSWORD_FILE)."
        )
    host = _normalize_vcenter_host(host)

    username = os.getenv("VCENTER_USER")
    if not username:
        raise RuntimeError("VCENTER_USER not set (e.g. administrator@vsphere.local).")

    # Prioritize direct env var over file-based password
    password = os.getenv("VCENTER_PASSWORD")
    if not password:
        password = _read_secret_file(os.getenv("VCENTER_PASSWORD_FILE"))
    if not password:
        raise RuntimeError("vCenter password not configured. Set VCENTER_PASSWORD or VCENTER_PASSWORD_FILE.")

    port = _parse_port(os.getenv("VCENTER_PORT", "443"), "VCENTER_PORT")
    verify_ssl = _env_bool("VCENTER_VERIFY_SSL", default=True)

    log_dir = os.getenv("LOG_DIR")

    return Settings(
        vcenter_host=host,
        vcenter_username=username,
        vcenter_password=password,
        vcenter_port=port,
        verify_ssl=verify_ssl,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=Path(log_dir) if log_dir else None,
    )
