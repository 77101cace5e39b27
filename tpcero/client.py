"""Client: logs, reads its configuration and console input, then sends them."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Iterator

from tpcero.protocol import Package, connect, send_message, send_package

DEFAULT_CONFIG = "cliente.config"
DEFAULT_LOG = "logger.log"


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or lacks a key."""


def init_logger(path: str = DEFAULT_LOG) -> logging.Logger:
    """Return a logger writing INFO and above to ``path`` and to the console."""
    logger = logging.getLogger("LOGGER_TP0")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.INFO)
    logger.propagate = False
    formatter = logging.Formatter("[%(levelname)s] %(asctime)s %(name)s - %(message)s")
    for handler in (logging.FileHandler(path), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def _close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def load_config(path: str = DEFAULT_CONFIG) -> dict[str, str]:
    """Read ``KEY=VALUE`` lines; blank lines and ``#`` comments are ignored."""
    try:
        with open(path, encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        raise ConfigError(f"cannot read configuration {path!r}: {exc}") from exc
    config: dict[str, str] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        config[key.strip()] = value.strip()
    return config


def _until_blank(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        if line == "":
            return
        yield line


def read_console(logger: logging.Logger, lines: Iterable[str]) -> list[str]:
    """Log and echo each line until an empty one; return the lines read."""
    read: list[str] = []
    for line in _until_blank(lines):
        logger.info("%s", line)
        print(line)
        read.append(line)
    return read


def build_package(lines: Iterable[str]) -> Package:
    """Collect lines into a package until an empty one, echoing each."""
    package = Package()
    for line in _until_blank(lines):
        package.add(line)
        print(line)
    return package


def _prompt_lines() -> Iterator[str]:
    while True:
        try:
            yield input("> ")
        except EOFError:
            return


def _require(config: dict[str, str], key: str) -> str:
    try:
        return config[key]
    except KeyError:
        raise ConfigError(f"missing configuration key {key!r}") from None


def main(argv: list[str] | None = None) -> int:
    """Run the client."""
    parser = argparse.ArgumentParser(prog="tpcero-client")
    parser.add_argument("--config", default=DEFAULT_CONFIG)
    parser.add_argument("--log", default=DEFAULT_LOG)
    args = parser.parse_args(argv)

    logger = init_logger(args.log)
    try:
        logger.info("Hola! Soy un log")
        try:
            config = load_config(args.config)
            ip = _require(config, "IP")
            port = _require(config, "PUERTO")
            value = _require(config, "CLAVE")
        except ConfigError as exc:
            print(exc, file=sys.stderr)
            return 1
        logger.info("%s", value)

        read_console(logger, _prompt_lines())

        try:
            conn = connect(ip, port)
        except OSError as exc:
            print(f"cannot connect to {ip}:{port}: {exc}", file=sys.stderr)
            return 1
        with conn:
            send_message(value, conn)
            send_package(build_package(_prompt_lines()), conn)
    finally:
        _close_logger(logger)

    print("CLIENTE CERRADO!")
    return 0


if __name__ == "__main__":
    sys.exit(main())