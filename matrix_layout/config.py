"""
Config Module
Runtime settings read from the environment.
"""

from dataclasses import dataclass
import os


@dataclass
class Settings:
    host: str = '127.0.0.1'
    port: int = 5000
    log_level: str = 'INFO'
    # largest container the HTTP surface accepts
    max_children: int = 500

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            host=os.environ.get('HOST', cls.host),
            port=int(os.environ.get('PORT', cls.port)),
            log_level=os.environ.get('LOG_LEVEL', cls.log_level).upper(),
            max_children=int(os.environ.get('MAX_CHILDREN', cls.max_children)),
        )
