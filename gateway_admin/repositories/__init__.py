from .config_store import ConfigStore
from .sqlalchemy_store import SqlAlchemyConfigStore

__all__ = ["ConfigStore", "SqlAlchemyConfigStore"]
