# tollgate/services/toll_system.py
"""
Composition root: builds config store, ledger, registry and processor from
Settings and owns their lifetime. The API keeps one TollSystem in app.state;
tests build their own against tmp paths.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from tollgate.services.config_store import ConfigStore, TollConfig
from tollgate.services.ledger import Ledger
from tollgate.services.toll_processor import TollProcessor
from tollgate.services.vehicle_registry import VehicleRegistry
from tollgate.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class TollSystem:
    config_store: ConfigStore
    ledger: Ledger
    registry: VehicleRegistry
    processor: TollProcessor

    @property
    def config(self) -> TollConfig:
        return self.processor.config

    def reload_config(self) -> TollConfig:
        """Re-read the config file; new rates apply to the next transaction."""
        self.processor.config = self.config_store.load()
        return self.processor.config

    def close(self):
        self.ledger.close()


def build_toll_system(settings, session_factory: Optional[Callable] = None) -> TollSystem:
    """
    Raises PersistenceUnavailable if the ledger files cannot be opened.
    A missing config or registry file only degrades the system.
    """
    ledger = Ledger(settings.TRANSACTION_LOG_PATH, settings.ERROR_LOG_PATH, session_factory)
    config_store = ConfigStore(settings.CONFIG_PATH)
    config = config_store.load()
    registry = VehicleRegistry.load(settings.REGISTRY_PATH, ledger=ledger)
    processor = TollProcessor(registry, ledger, config)

    logger.info(f"[SYSTEM] Ready: {len(registry)} vehicles, "
                f"{'default' if config.from_defaults else 'file'} rates")
    return TollSystem(config_store=config_store, ledger=ledger, registry=registry, processor=processor)
