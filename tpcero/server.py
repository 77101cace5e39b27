"""Server: accepts one client and logs every message and package it sends."""

from __future__ import annotations

import argparse
import logging
import socket
import sys

from tpcero.protocol import (
    DEFAULT_PORT,
    ConnectionClosed,
    OpCode,
    receive_message,
    receive_operation,
    receive_package,
    start_server,
    wait_client,
)

DEFAULT_LOG = "log.log"


def init_logger(path: str = DEFAULT_LOG) -> logging.Logger:
    """Return a logger writing DEBUG and above to ``path`` and to the console."""
    logger = logging.getLogger("Servidor")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    formatter = logging.Formatter("[%(levelname)s] %(asctime)s %(name)s - %(message)s")
    for handler in (logging.FileHandler(path), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def handle_client(sock: socket.socket, logger: logging.Logger) -> None:
    """Serve frames from one client until it disconnects."""
    while True:
        try:
            code = receive_operation(sock)
            if code == OpCode.MESSAGE:
                logger.info("Me llego el mensaje %s", receive_message(sock))
            elif code == OpCode.PACKAGE:
                values = receive_package(sock)
                logger.info("Me llegaron los siguientes valores:\n")
                for value in values:
                    logger.info("%s", value)
            else:
                logger.warning("Operacion desconocida. No quieras meter la pata")
        except ConnectionClosed:
            sock.close()
            logger.error("el cliente se desconecto. Terminando servidor")
            return


def main(argv: list[str] | None = None) -> int:
    """Run the server for a single client; returns 1 once it disconnects."""
    parser = argparse.ArgumentParser(prog="tpcero-server")
    parser.add_argument("--port", default=DEFAULT_PORT)
    parser.add_argument("--log", default=DEFAULT_LOG)
    args = parser.parse_args(argv)

    logger = init_logger(args.log)
    try:
        with start_server(args.port) as server:
            logger.info("Servidor listo para recibir al cliente")
            client = wait_client(server)
            handle_client(client, logger)
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    return 1


if __name__ == "__main__":
    sys.exit(main())