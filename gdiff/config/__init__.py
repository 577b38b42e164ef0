from .app_config import AppConfig, ConfigError, Theme, load_config, save_config
