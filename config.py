import json
import logging
import os
from dataclasses import dataclass, asdict

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

# config.json / environment variable name -> DbConfig field
KEYS = {
    "DB_SERVER": "host",
    "DB_PORT": "port",
    "DB_NAME": "database",
    "DB_USER": "user",
    "DB_PASSWORD": "password",
}


@dataclass
class DbConfig:
    host: str = "localhost"
    port: int = 3306
    database: str = "SampleDB"
    user: str = "root"
    password: str = ""

    def connect_kwargs(self):
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.user,
            "password": self.password,
        }

    def describe(self):
        # safe to log, no password
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


def _parse_port(value):
    try:
        port = int(str(value).strip())
    except ValueError:
        raise ValueError(f"DB_PORT must be a number, got {value!r}")
    if not 0 < port < 65536:
        raise ValueError(f"DB_PORT out of range: {port}")
    return port


def _read_config_file(config_file):
    with open(config_file, encoding="utf-8") as f:
        text = f.read()
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        lines = text.splitlines()
        bad = lines[e.lineno - 1].strip() if e.lineno <= len(lines) else "?"
        raise ValueError(f"{config_file}: invalid JSON ({e.msg}) at Line {e.lineno}: {bad}") from e


def load_config(config_file=CONFIG_FILE, environ=None):
    """
    Build the DbConfig: defaults, then config.json (if present), then
    DB_* environment variables. Later sources override earlier ones.
    """
    environ = os.environ if environ is None else environ
    values = asdict(DbConfig())

    if config_file and os.path.exists(config_file):
        data = _read_config_file(config_file)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_file} must contain a JSON object")
        for key, field in KEYS.items():
            if key in data:
                values[field] = data[key]
        logger.debug(f"[load_config] Read {config_file}")

    for key, field in KEYS.items():
        if environ.get(key) is not None:
            values[field] = environ[key]

    values["port"] = _parse_port(values["port"])
    for field in ("host", "database", "user", "password"):
        values[field] = str(values[field])
    return DbConfig(**values)


def save_config(cfg, config_file=CONFIG_FILE):
    data = {key: getattr(cfg, field) for key, field in KEYS.items()}
    try:
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.info(f"[save_config] Saved {config_file} for {cfg.describe()}")
    except IOError as e:
        logger.error(f"[save_config] Error writing {config_file}: {str(e)}")
        raise


def log_level(environ=None):
    environ = os.environ if environ is None else environ
    name = environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, name, None)
    return level if isinstance(level, int) else logging.INFO
