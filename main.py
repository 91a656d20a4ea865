import sys
from dataclasses import dataclass, field
from datetime import timedelta

from rich.pretty import pprint

from stratum import *


@dataclass
class Mongo:
    hosts: StringList = setting(default="mongo")
    connection_timeout: timedelta = setting(default="10s")
    replica_set: str = setting()
    max_pool_size: UInt64 = setting(default="100")
    tls: bool = setting(flag="tls", env="COOL_MONGO_TLS")
    username: str = setting()
    password: str = setting()
    database: str = setting(default="cool")


@dataclass
class JWT:
    secret: str = setting()
    token_expiration: timedelta = setting(default="24h")
    refresh_token_expiration: timedelta = setting(default="168h")


@dataclass
class AWS:
    region: str = setting(default="eu-central-1")


@dataclass
class Config:
    env: str = setting(help="environment [development|production]", default="development")
    port: UInt = setting(default="3000")
    mongo: Mongo = field(default_factory=Mongo)
    jwt: JWT = field(default_factory=JWT)
    aws: AWS = field(default_factory=AWS)
    start: Timestamp = setting(default="2002-10-02T10:00:00-05:00", factory=Timestamp)


if __name__ == '__main__':
    config = Config()
    binder = Binder("cool", colorful=True)
    binder.parse(config, sys.argv[1:])
    pprint(config)
