from http.server import BaseHTTPRequestHandler
from http import HTTPStatus
import json
import logging

from library_gateway.config import get_settings
from library_gateway.logging_setup import setup_logging
from library_gateway.service import LibraryReply, handle_library_request

setup_logging(get_settings().log_level)
logger = logging.getLogger("api.library")


class handler(BaseHTTPRequestHandler):
    def _content_length(self) -> int:
        try:
            return int(self.headers.get("content-length", "0"))
        except ValueError:
            return 0

    def _send(self, reply: LibraryReply, *, with_body: bool = True) -> None:
        body = json.dumps(reply.body).encode("utf-8")
        self.send_response(reply.status_code)
        for k, v in reply.headers.items():
            self.send_header(k, v)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if with_body:
            self.wfile.write(body)

    def _dispatch(self) -> LibraryReply:
        return handle_library_request(
            self.command,
            self.headers,
            content_length=self._content_length(),
            peer=self.client_address[0] if self.client_address else None,
        )

    def do_OPTIONS(self):
        self._send(self._dispatch())

    def do_POST(self):
        reply = self._dispatch()
        length = self._content_length()
        # Body is unused; drain it unless it was rejected for size.
        if reply.status_code == 413:
            self.close_connection = True
        elif length > 0:
            self.rfile.read(length)
        self._send(reply)

    def do_GET(self):
        self._send(self._dispatch())

    do_PUT = do_GET
    do_PATCH = do_GET
    do_DELETE = do_GET

    def do_HEAD(self):
        self._send(self._dispatch(), with_body=False)

    def send_error(self, code, message=None, explain=None):
        # Unknown verbs (TRACE, PROPFIND, ...) land here as 501; answer them with the 405 envelope.
        if code == HTTPStatus.NOT_IMPLEMENTED and self.command:
            self.close_connection = True
            self._send(self._dispatch())
            return
        super().send_error(code, message, explain)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)
