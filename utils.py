from flask import current_app, jsonify, Response
from flask_restful import Resource
import logging
import os
import sqlite3
from typing import Any, Dict
import yaml
from markov.bot import Bot
from markov.chain import Chain
from markov.choose import RandomChooser
from markov.shuffle import RandomShuffler
from markov.sqlite_store import SqliteStore
from markov.store import MemoryStore, WeightStore



logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "order": 2,
    "sqlite_path": None,
    "verbosity": 0.05,
    "bot_name": "markov",
    "chat_api_url": "http://localhost:8014/message",
    "say_api_url": "http://localhost:8014/say",
    "host": "0.0.0.0",
    "port": 8014,
    "log_path": "logs/chat_server.log",
    "training_data": "markov_data.txt",
}


class ConfigError(Exception):
    """
    Exception raised when config.yaml is missing or holds invalid values.
    """
    def __init__(self, message="Invalid configuration"):
        super().__init__(message)


def load_config(path : str) -> Dict[str, Any]:
    """
    Reads the YAML config and fills in defaults.

    Parameters
    ----------
    path : str
        Path to config.yaml.

    Returns
    -------
    dict
        The validated config.
    """
    try:
        with open(path, "r") as f:
            loaded = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}")

    if not isinstance(loaded, dict):
        raise ConfigError("Configuration file must hold a mapping")

    config = {**DEFAULT_CONFIG, **loaded}

    # bool is an int subclass, reject it explicitly.
    order = config["order"]
    if isinstance(order, bool) or not isinstance(order, int) or order < 0:
        raise ConfigError(f"`order` must be a non-negative integer, got {order!r}")

    verbosity = config["verbosity"]
    if isinstance(verbosity, bool) or not isinstance(verbosity, (int, float)) \
            or not 0.0 <= verbosity < 1.0:
        raise ConfigError(f"`verbosity` must be in range [0, 1), got {verbosity!r}")

    return config


def setup_logging(log_path : str) -> None:
    """
    Logs to the console and to `log_path`.
    """
    os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)

    # Set up logging configuration.
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Print logs to the console.
            logging.StreamHandler(),
            # Write logs to a file.
            logging.FileHandler(log_path)])


def create_store(config : Dict[str, Any]) -> WeightStore:
    """
    SQLite store when `sqlite_path` is set, otherwise an in-memory one.
    """
    if config["sqlite_path"]:
        # Access is serialized by the chat server's lock, not by thread.
        connection = sqlite3.connect(
            config["sqlite_path"],
            check_same_thread=False)
        logger.info(
            f"Using SQLite store at {config['sqlite_path']}")
        return SqliteStore(connection, config["order"])

    logger.info("Using in-memory store")
    return MemoryStore(config["order"])


def build_bot(config : Dict[str, Any]) -> Bot:
    """
    Wires the production bot: system RNG for sampling and shuffling.
    """
    chain = Chain(create_store(config), RandomChooser())
    return Bot(chain, RandomShuffler())


class HealthCheckAPI(Resource):
    """
    Simple health check API to monitor the server status.
    """
    def get(self) -> Response:
        bot = current_app.config["BOT"]
        return jsonify({"status": "ok", "order": bot.chain.order})
