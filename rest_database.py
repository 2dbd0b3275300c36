from config import Config, setup_logging
from key_image_registry import SqliteKeyImageRegistry

# reset the key image registry
if __name__ == '__main__':
    config = Config.from_env()
    logger = setup_logging(config.log_level)
    registry = SqliteKeyImageRegistry(config.database)
    logger.info("Dropping %d linked key images from %s", len(registry), config.database)
    registry.reset()
