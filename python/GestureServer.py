import json
import logging
import socket

log = logging.getLogger(__name__)


class GestureServer:
    """
    Live preview channel for a UI client: one newline-terminated JSON
    document per frame out, newline-terminated JSON commands in
    (currently ``{"cmd": "reset"}``). Never blocks the frame loop.
    """

    def __init__(self, host="127.0.0.1", port=5555):
        self.addr = (host, port)
        self.conn = None
        self._inbox = b""

        self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server.bind(self.addr)
        self.server.listen(1)
        self.server.setblocking(False)  # non-blocking accept
        log.info("Waiting for preview client on %s:%s ...", host, port)

    def update(self):
        """Check for a new client non-blockingly."""
        if self.conn is not None:
            return
        try:
            self.conn, addr = self.server.accept()
        except BlockingIOError:
            return
        self.conn.setblocking(False)
        self._inbox = b""
        log.info("Client connected: %s", addr)

    def send_frame(self, result, fps=None):
        """
        result: FrameResult from the engine.
        Sends a JSON document newline-terminated.
        """
        if self.conn is None:
            return
        msg = json.dumps({**result.to_dict(), "fps": fps}) + "\n"
        try:
            self.conn.sendall(msg.encode("utf-8"))
        except BlockingIOError:
            # slow reader: drop this frame, the next one supersedes it
            log.debug("preview client busy, frame dropped")
        except OSError as e:
            log.warning("Client disconnected: %s", e)
            self._drop()

    def read_commands(self):
        """Commands received since the last call, parsed."""
        if self.conn is None:
            return []
        try:
            chunk = self.conn.recv(4096)
        except BlockingIOError:
            return []
        except OSError as e:
            log.warning("Client disconnected: %s", e)
            self._drop()
            return []
        if not chunk:
            log.info("Client closed the connection")
            self._drop()
            return []

        self._inbox += chunk
        *lines, self._inbox = self._inbox.split(b"\n")
        commands = []
        for line in lines:
            if not line.strip():
                continue
            try:
                command = json.loads(line)
            except ValueError:
                command = None
            if not isinstance(command, dict):
                log.warning("ignoring malformed command: %r", line[:80])
                continue
            commands.append(command)
        return commands

    def _drop(self):
        if self.conn is not None:
            self.conn.close()
        self.conn = None

    def close(self):
        self._drop()
        self.server.close()
