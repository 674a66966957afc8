"""IRC connection that feeds channel events to the LogBot handlers.

Connects to the configured server, joins the configured channels, keeps the
channel roster up to date, and calls one handler per event. Runs in the
calling thread and reconnects after a short delay if the connection drops.
"""

import socket
import time
from dataclasses import dataclass, field

from logbot import handlers
from logbot.context import LogBotContext

RECONNECT_DELAY = 5
REGISTRATION_TIMEOUT = 15
READ_TIMEOUT = 30

CHANNEL_TYPES = "#&+!"


@dataclass
class Message:
    source: str = ""
    command: str = ""
    params: list[str] = field(default_factory=list)

    @property
    def nick(self) -> str:
        return self.source.split("!", 1)[0]


def parse_line(line: str) -> Message:
    """Split a raw IRC line into source, command and parameters."""
    line = line.rstrip("\r\n")
    if line.startswith("@"):
        line = line.split(" ", 1)[1] if " " in line else ""

    source = ""
    if line.startswith(":"):
        source, _, line = line[1:].partition(" ")

    trailing = None
    if " :" in line:
        line, trailing = line.split(" :", 1)
    elif line.startswith(":"):
        line, trailing = "", line[1:]

    parts = line.split()
    command = parts[0].upper() if parts else ""
    params = parts[1:]
    if trailing is not None:
        params.append(trailing)
    return Message(source=source, command=command, params=params)


def is_channel(target: str) -> bool:
    return bool(target) and target[0] in CHANNEL_TYPES


class IRCClient:
    def __init__(self, ctx: LogBotContext):
        self.ctx = ctx
        server = ctx.settings.server
        self.host = server.host
        self.port = server.port
        self.nick = server.nick
        self.channels = list(server.channels)
        self._sock: socket.socket | None = None
        self._recv_buf = b""
        self._registered = False
        self._stopping = False

    @property
    def network(self) -> str:
        return self.ctx.network

    def run(self):
        """Connect and process events until `stop()` is called."""
        self._stopping = False
        while not self._stopping:
            try:
                self._connect()
                self._read_loop()
            except Exception as e:
                if self._stopping:
                    break
                print(f"[IRC Client] Connection lost: {e}")
            finally:
                self._registered = False
                self._recv_buf = b""
                if self._sock:
                    try:
                        self._sock.close()
                    except OSError:
                        pass
                    self._sock = None
            if self._stopping:
                break
            time.sleep(RECONNECT_DELAY)

    def stop(self):
        self._stopping = True
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass

    # ── Connection ────────────────────────────────────────────

    def _connect(self):
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self._sock.settimeout(10)
        self._sock.connect((self.host, self.port))

        self._raw_send(f"NICK {self.nick}")
        self._raw_send(f"USER {self.nick} 0 * :LogBot")

        deadline = time.monotonic() + REGISTRATION_TIMEOUT
        while time.monotonic() < deadline:
            self.process_lines(self._recv_lines(timeout=2.0))
            if self._registered:
                break

        if not self._registered:
            raise RuntimeError("IRC registration timed out")

        print(f"[IRC Client] Connected to {self.host}:{self.port} as {self.nick}")
        for channel in self.channels:
            self._raw_send(f"JOIN {channel}")

    def _read_loop(self):
        while not self._stopping:
            self._sock.settimeout(READ_TIMEOUT)
            try:
                data = self._sock.recv(8192)
            except socket.timeout:
                self._raw_send(f"PING :{int(time.time())}")
                continue
            except OSError:
                break
            if not data:
                break
            self._recv_buf += data
            self.process_lines(self._drain_lines())

    # ── Dispatch ──────────────────────────────────────────────

    def process_lines(self, lines: list[str]):
        for line in lines:
            if not line:
                continue
            try:
                self.handle(parse_line(line))
            except Exception as e:
                print(f"[IRC Client] Error handling line: {e}")

    def handle(self, msg: Message):
        """Update roster state and call the handler for one server message."""
        ctx, roster, net = self.ctx, self.ctx.roster, self.network
        p = msg.params

        if msg.command == "PING":
            self._raw_send(f"PONG :{p[-1] if p else ''}")
        elif msg.command == "001":
            self._registered = True
            if p:
                self.nick = p[0]
        elif msg.command in ("376", "422"):
            self._registered = True
        elif msg.command == "433" and not self._registered:
            self.nick += "_"
            self._raw_send(f"NICK {self.nick}")
        elif msg.command == "005":
            for token in p[1:]:
                if token.startswith("PREFIX="):
                    roster.set_prefix_spec(token[len("PREFIX="):])
                elif token.startswith("CHANMODES="):
                    roster.set_chanmodes(token[len("CHANMODES="):])
        elif msg.command == "353" and len(p) >= 4:
            roster.names(p[2], p[3].split())
        elif msg.command == "PRIVMSG" and len(p) >= 2:
            self._handle_privmsg(msg)
        elif msg.command == "JOIN" and p:
            roster.join(p[0], msg.nick)
            handlers.on_join(ctx, net, p[0], msg.nick)
        elif msg.command == "PART" and p:
            handlers.on_part(ctx, net, p[0], msg.nick, p[1] if len(p) > 1 else None)
            if self._is_me(msg.nick):
                roster.forget(p[0])
            else:
                roster.part(p[0], msg.nick)
        elif msg.command == "KICK" and len(p) >= 2:
            handlers.on_kick(ctx, net, p[0], p[1], msg.nick, p[2] if len(p) > 2 else None)
            if self._is_me(p[1]):
                roster.forget(p[0])
            else:
                roster.kick(p[0], p[1])
        elif msg.command == "QUIT":
            handlers.on_quit(ctx, net, msg.nick, p[0] if p else None)
            roster.quit(msg.nick)
        elif msg.command == "NICK" and p:
            handlers.on_nick(ctx, net, p[0], msg.nick)
            roster.rename(msg.nick, p[0])
            if self._is_me(msg.nick):
                self.nick = p[0]
        elif msg.command == "TOPIC" and p:
            handlers.on_topic(ctx, net, p[0], msg.nick, p[1] if len(p) > 1 else "")
        elif msg.command == "MODE" and len(p) >= 2 and is_channel(p[0]):
            roster.mode(p[0], p[1], p[2:])

    def _handle_privmsg(self, msg: Message):
        target, text = msg.params[0], msg.params[1]
        if not is_channel(target):
            return
        if text.startswith("\x01ACTION") and text.endswith("\x01"):
            action = text[len("\x01ACTION"):-1].lstrip(" ")
            handlers.on_action(self.ctx, self.network, target, msg.nick, action)
        elif text.startswith("\x01"):
            # other CTCP requests are not chat
            return
        else:
            handlers.on_message(self.ctx, self.network, target, msg.nick, text)

    def _is_me(self, nick: str) -> bool:
        return nick.lower() == self.nick.lower()

    # ── Socket I/O ────────────────────────────────────────────

    def _raw_send(self, line: str):
        if self._sock:
            self._sock.sendall((line + "\r\n").encode("utf-8"))

    def _recv_lines(self, timeout: float = 10.0) -> list[str]:
        self._sock.settimeout(timeout)
        try:
            data = self._sock.recv(8192)
            if not data:
                return []
            self._recv_buf += data
        except socket.timeout:
            return []
        return self._drain_lines()

    def _drain_lines(self) -> list[str]:
        # Decode complete lines only, a UTF-8 sequence can span two reads.
        lines: list[str] = []
        while b"\r\n" in self._recv_buf:
            line, self._recv_buf = self._recv_buf.split(b"\r\n", 1)
            lines.append(line.decode("utf-8", errors="replace"))
        return lines
