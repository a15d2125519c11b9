import logging
from typing import Any, List, Optional

from pyVim.connect import Disconnect, SmartConnect
from pyVim.task import WaitForTask
from pyVmomi import vim

from .config import Settings

logger = logging.getLogger(__name__)


class VSphereClient:
    """Explicit vCenter session used to look up and reconfigure distributed switches."""

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = 443,
        verify_ssl: bool = True,
    ):
        self.host = host
        self.username = username
        self.password = password
        self.port = port
        self.verify_ssl = verify_ssl
        self.service_instance: Optional[Any] = None
        self.logger = logging.getLogger(f"{__name__}.{host}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "VSphereClient":
        return cls(
            host=settings.vcenter_host,
            username=settings.vcenter_username,
            password=settings.vcenter_password,
            port=settings.vcenter_port,
            verify_ssl=settings.verify_ssl,
        )

    def connect(self) -> "VSphereClient":
        if self.service_instance is None:
            self.logger.info("Connecting to vCenter %s:%s as %s", self.host, self.port, self.username)
            self.service_instance = SmartConnect(
                host=self.host,
                user=self.username,
                pwd=self.password,
                port=self.port,
                disableSslCertValidation=not self.verify_ssl,
            )
        return self

    def disconnect(self) -> None:
        if self.service_instance is not None:
            self.logger.info("Disconnecting from vCenter %s", self.host)
            Disconnect(self.service_instance)
            self.service_instance = None

    def __enter__(self) -> "VSphereClient":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    @property
    def content(self) -> Any:
        if self.service_instance is None:
            raise RuntimeError(f"Not connected to vCenter {self.host}; call connect() first")
        return self.service_instance.RetrieveContent()

    def find_switches(self, name: str) -> List[Any]:
        """Return every distributed switch in the inventory whose name equals `name`."""
        content = self.content
        view = content.viewManager.CreateContainerView(
            content.rootFolder, [vim.DistributedVirtualSwitch], True
        )
        try:
            matches = [dvs for dvs in view.view if dvs.name == name]
        finally:
            view.Destroy()
        self.logger.debug("Found %s distributed switch(es) named %s", len(matches), name)
        return matches

    def reconfigure_traffic_resources(self, switch: Any, config_version: str, entries: List[Any]) -> None:
        """
        Submit a VDS reconfiguration carrying the observed configVersion and the full
        infrastructure traffic resource list, then block until the task finishes.

        Task failures (e.g. vim.fault.ConcurrentAccess on a stale configVersion)
        are raised as-is.
        """
        spec = vim.dvs.VmwareDistributedVirtualSwitch.ConfigSpec()
        spec.configVersion = config_version
        spec.infrastructureTrafficResourceConfig = entries
        self.logger.info("Reconfiguring switch %s (configVersion=%s)", switch.name, config_version)
        task = switch.ReconfigureDvs_Task(spec)
        WaitForTask(task, si=self.service_instance)
