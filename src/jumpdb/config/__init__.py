from jumpdb.config.config import StoreConfig

__all__ = ["StoreConfig"]
