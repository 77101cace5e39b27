# tpcero

`tpcero` is a TCP client and server that talk over a small binary protocol.
The client can send two kinds of frame:

- a **message**: one NUL-terminated string.
- a **package**: a list of values. Each value has its length in front of it.

A frame has three parts in this order: an operation code, the payload size,
and the payload. Both integers are little-endian signed 32-bit values. The
operation codes are in `tpcero.protocol.OpCode`:

| Member    | Value |
|-----------|-------|
| `MESSAGE` | 0     |
| `PACKAGE` | 1     |
| `CONSOLE` | 2     |

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
tpcero-server [--port PORT] [--log FILE]
```

The server listens on every local IPv4 address. The default port is 4444. It
accepts one client and handles it as follows:

- For each message, it logs `Me llego el mensaje <text>`.
- For each package, it logs every value in the package.
- For an unknown operation code, it logs a warning.

When the client disconnects, the server logs an error and exits with status 1.
Log records go to the terminal and to the log file. The default log file is
`log.log`, and the level is DEBUG.

## Running the client

```
tpcero-client [--config FILE] [--log FILE]
```

The client runs these steps in order:

1. It reads the configuration file, which is `cliente.config` unless you give
   another one. The file must have the keys `IP`, `PUERTO` and `CLAVE`. The
   client logs the value of `CLAVE`.
2. It reads lines at the `> ` prompt. It logs and echoes each line. An empty
   line or end of input ends this step.
3. It connects to `IP`:`PUERTO` and sends `CLAVE` as a message.
4. It reads more lines at the prompt and sends them all as one package. An
   empty line or end of input ends the package.

The client writes its log to `logger.log` unless you give another file, and
also to the terminal, at INFO level. It exits with status 1 in two cases: the
configuration cannot be read or is missing a key, or the connection fails.

The configuration file has one `KEY=VALUE` pair per line. Blank lines are
ignored, and so are lines that start with `#`:

```
IP=127.0.0.1
PUERTO=4444
CLAVE=hola
```

## Using the library

```python
from tpcero.protocol import Package, connect, send_message, send_package

sock = connect("127.0.0.1", "4444")
send_message("hello", sock)

package = Package()
package.add("first")    # strings are sent UTF-8 encoded and NUL-terminated
package.add(b"second")  # bytes are sent as they are
send_package(package, sock)
sock.close()
```

The following functions give you frames as bytes without a socket:

- `Package.serialize()` returns the frame for a package.
- `encode_message()` returns the frame for a message.
- `decode_values()` splits a package payload back into a list of strings.

On the receiving side, use these functions:

- `start_server` and `wait_client` open a listening socket and accept a
  client.
- `receive_operation` reads the next operation code.
- `receive_message` and `receive_package` read the payload that follows it.
- `receive_buffer` reads a raw size-prefixed payload.

If the peer closes the connection partway through a frame, the receiving
functions raise `ConnectionClosed`. When `receive_operation` raises it, the
socket is also closed. A negative size or a truncated value raises
`ProtocolError`.

## Limitations

- The server handles exactly one client and then exits. It does not go back
  to accept another client.
- The client sends one message and one package per run.
- The `CONSOLE` operation code is defined, but neither program sends it. The
  server treats it as an unknown operation.