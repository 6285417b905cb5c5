# zinx

A lightweight framework for building TCP servers in Python.

zinx accepts TCP connections, splits the byte stream into framed
messages, and dispatches each message by its numeric ID to a router you
register. Around that core it provides:

- a connection manager (`zinx.connmanager.ConnManager`) with a
  connection limit, and per-connection properties,
- a worker pool (`zinx.msghandler.MsgHandler`) that spreads requests
  over a fixed number of task queues, chosen by connection ID,
- hooks that run when a connection starts and when it stops,
- a levelled logger with configurable header fields and optional file
  output,
- a hierarchical timing wheel (hours, minutes, seconds) and a scheduler
  for running delayed calls,
- an area-of-interest grid and a world manager for game-style servers.

It has no third-party dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Wire format

Every message on the wire is an 8-byte header followed by the payload:

| bytes | field       | encoding                       |
|-------|-------------|--------------------------------|
| 0–3   | data length | unsigned 32-bit, little-endian |
| 4–7   | message ID  | unsigned 32-bit, little-endian |
| 8–…   | data        | raw bytes                      |

`zinx.datapack.DataPack` packs a `zinx.message.Message` into this format
and unpacks a header back into a `Message` that carries the ID and the
announced length but no data yet. `DataPack(max_packet_size)` caps the
announced length; 0 turns the check off and `None` takes the value from
the configuration. Unpacking a header that is too short, or whose data
length exceeds the cap, raises `zinx.datapack.PacketError`.

## Writing a server

Subclass `zinx.router.Router` and override `handle` (and, if you need
them, `pre_handle` and `post_handle`; all three run in that order for
every request). A handler receives a `zinx.request.Request` with
`connection`, `msg`, `data` and `msg_id`. Register routers by message ID
on a `zinx.server.Server`, then start it:

```python
from zinx.config import get_config
from zinx.demo_server import HelloZinxRouter, PingRouter
from zinx.server import Server

server = Server(get_config())
server.add_router(0, PingRouter())
server.add_router(1, HelloZinxRouter())
server.serve()
```

`Server(config, packet, host, port)` takes an optional framing object in
place of `DataPack`, and a host and port that override the
configuration. Port 0 picks a free port; `address()` then tells which.
`start()` listens without blocking, `serve()` starts and blocks until
`stop()` is called, and `stop()` closes the listener and stops every
connection. Clients beyond `MaxConn` are closed as soon as they connect.
A request whose message ID has no router is logged and dropped.

Registering a second router for a message ID that already has one raises
`zinx.msghandler.DuplicateRouteError`.

Connection hooks are set with `set_on_conn_start` and `set_on_conn_stop`.
Each hook receives the `zinx.connection.Connection`. From there you can
send replies with `send_msg` (written straight away) or `send_buff_msg`
(queued to the connection's writer; raises `TimeoutError` if the queue
stays full for 5 ms). You can attach data to the connection with
`set_property`, `get_property` (raises `KeyError` when absent) and
`remove_property`. Sending on a closed connection raises
`zinx.connection.ConnectionClosedError`.

## Configuration

`zinx.config.load_config(argv)` builds a `GlobalConfig` from defaults
and a JSON file, by default `conf/zinx.json` under the working
directory; pass `-c <path>` on the command line to use another file. A
relative path is resolved against the working directory. A missing file
leaves every setting at its default. `get_config()` returns the settings
last loaded, loading them if needed.

```json
{
  "Name": "ZinxServerApp",
  "Host": "0.0.0.0",
  "TCPPort": 8999,
  "MaxConn": 12000,
  "MaxPacketSize": 4096,
  "WorkerPoolSize": 10,
  "MaxWorkerTaskLen": 1024,
  "MaxMsgChanLen": 1024,
  "LogDir": "log",
  "LogFile": "",
  "LogDebugClose": false
}
```

Keys are matched case-insensitively; unknown keys and `null` values are
ignored. A value of the wrong type or out of range raises `ValueError`.
If `LogFile` is set, log output is appended to that file inside
`LogDir`; otherwise it goes to standard error. `LogDebugClose` switches
off debug-level messages.

With `WorkerPoolSize` set to 0, every request is handled on its own
thread instead of going through the worker queues.

`zinx.flags.FlagSet` is the small flag parser behind `-c`: it reads
single-dash bool, int, float, string and duration flags, and gives a
name registered twice a numeric suffix (`c`, then `c1`, `c2`, …).

## Logging

`zinx.stdlog` offers module-level functions backed by one shared
`zinx.logger.ZinxLogger`: `debug`, `info`, `warn`, `error`, their
`…f` formatting variants (`%`-style), `stack`, `panic` and `fatal`.
`stack` appends the stacks of all threads. `panic` logs the message and
then raises `zinx.logger.LogPanic`. `fatal` logs the message and then
raises `SystemExit(1)`.

The header fields are chosen with `reset_flags` and `add_flag` from the
bits in `zinx.logger`: `BIT_DATE`, `BIT_TIME`, `BIT_MICROSECONDS`,
`BIT_LONG_FILE`, `BIT_SHORT_FILE` and `BIT_LEVEL` (`BIT_DEFAULT` is
level, short file, date and time). `set_prefix` adds a `<prefix>` to
every line. `set_log_file` redirects output to a file; `close_debug`
and `open_debug` drop or restore debug lines.

## Timers

`zinx.timerscheduler.new_auto_exec_timer_scheduler()` returns a running
`TimerScheduler` that calls each `zinx.delayfunc.DelayFunc` in its own
thread when it comes due. Schedule calls with `create_timer_after`
(a `timedelta` or a number of seconds) or `create_timer_at` (Unix
nanoseconds); each returns a timer ID that `cancel_timer` accepts.
`stop()` ends the scheduler's threads, and the scheduler can be used as
a context manager. Timers are kept to millisecond precision, and the
scheduler polls every 50 ms. An exception raised inside a delayed call
is logged and does not stop the scheduler.

For a single delayed call without a wheel, `zinx.timer.new_timer_after`
returns a `Timer` whose `run()` sleeps in a thread and then calls it.
`zinx.timewheel.TimeWheel` can also be driven by hand with `tick()` and
`get_timer_within()`.

## Area of interest

`zinx.aoi.AOIManager` divides a rectangle into a grid of `zinx.aoi.Grid`
cells numbered row by row. It answers which cell a position falls in
(`get_gid_by_pos`), which cells surround a cell
(`get_surround_grids_by_gid`, the cell itself first, up to nine), and
which player IDs are in and around a position (`get_pids_by_pos`).
`zinx.world.WorldManager` keeps the online players by ID and places
them in the grid; a player is any object with `pid`, `x` and `z`
attributes.

## What it does not do

The area-of-interest grid and world manager only track positions and
IDs. The package has no player type, no game message encoding and no
game server: broadcasting moves, chat or players entering and leaving
view is left to your own routers. There is no TLS and no client library
beyond the demo client.

## Demo programs

Start the demo server. It listens on the configured port (8999 by
default), greets each new client with message ID 2, and answers message
ID 0 with a ping reply and message ID 1 with a hello reply:

```
zinx-demo-server
```

It accepts `-c <path>` for a configuration file.

In another terminal, run the demo client. It connects to the server and
sends a ping once a second, printing each reply:

```
zinx-demo-client
```

It accepts `--host`, `--port`, `--rounds` (default: forever) and
`--interval` (seconds).