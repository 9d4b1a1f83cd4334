#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
HTTP Request Handler Module for docserve
----------------------------------------
Parses HTTP requests from client sockets, resolves them to files below the
served root and writes the responses.
"""

import logging
import traceback
import urllib.parse
from collections import namedtuple

from .cache import CacheEntry

HTTP_STATUS = {
    200: 'OK',
    400: 'Bad Request',
    404: 'Not Found',
    500: 'Internal Server Error'
}

# Request outcomes
SERVED = 'served'
REDIRECTED = 'redirected'
NOT_FOUND = 'not-found'
READ_ERROR = 'read-error'

ERROR_CONTENT_TYPE = 'text/plain; charset=utf-8'

ResolutionRecord = namedtuple('ResolutionRecord', [
    'original_path', 'resolved_path', 'relative_path', 'outcome', 'content_type', 'from_cache'
])

Response = namedtuple('Response', ['status', 'headers', 'body', 'record'])


class RequestHandler:
    """
    Handles HTTP requests for a single served directory.

    Every method is served from the same catch-all route: OPTIONS gets an
    empty 200, HEAD gets the headers of the matching GET, everything else is
    treated as GET.
    """

    def __init__(self, server_config, resolver, content_types, cache=None):
        """
        Initialize the request handler.

        Args:
            server_config: ServerConfig instance
            resolver: PathResolver for the served root
            content_types: ContentTypeResolver shared by all requests
            cache: Optional ContentCache, None disables caching
        """
        self.config = server_config
        self.resolver = resolver
        self.content_types = content_types
        self.cache = cache
        self.logger = logging.getLogger('RequestHandler')

    def handle_request(self, client_socket, client_address):
        """
        Handle one HTTP request on a connected client socket.

        Args:
            client_socket: Client socket object
            client_address: Client address tuple (ip, port)
        """
        try:
            request = self._parse_request(client_socket)

            if not request:
                self.logger.warning(f"Invalid request from {client_address[0]}:{client_address[1]}")
                self._send_response(client_socket, self._error_response('GET', 400, 'Bad Request', None))
                return

            response = self.respond(request['method'], request['path'])
            self._send_response(client_socket, response)

        except ConnectionError as e:
            self.logger.debug(f"Connection from {client_address[0]}:{client_address[1]} dropped: {e}")
        except Exception as e:
            self.logger.error(f"Error handling request from {client_address[0]}:{client_address[1]}: {e}")
            self.logger.debug(traceback.format_exc())
            self._send_response(client_socket, self._error_response('GET', 500, 'Internal Server Error', None))

    def respond(self, method, path):
        """
        Build the response for a request.

        The resolved path is tried first, then the default document. The
        cache is checked for each candidate, so cache keys are always final
        resolved paths.

        Args:
            method: HTTP method
            path: Decoded request path

        Returns:
            Response: Status, headers, body and resolution record
        """
        if method == 'OPTIONS':
            return Response(200, {'Content-Length': '0'}, b'', None)

        tried = []
        last_error = None

        for full_path in self.resolver.candidates(path):
            tried.append(full_path)

            if self.cache is not None:
                entry = self.cache.lookup(full_path)
                if entry is not None:
                    return self._content_response(method, path, full_path, entry, from_cache=True)

            try:
                f = open(full_path, 'rb')
            except OSError as e:
                last_error = e
                continue

            with f:
                try:
                    raw = f.read()
                except OSError as e:
                    record = self._record(path, full_path, READ_ERROR)
                    self.logger.error(f"{path} => {record.relative_path} (500, unable to read file: {e})")
                    return self._error_response(method, 500, 'unable to read file', record)

            entry = CacheEntry(raw, self.content_types.resolve(full_path, raw))
            if self.cache is not None:
                self.cache.store(full_path, entry)
            return self._content_response(method, path, full_path, entry, from_cache=False)

        record = self._record(path, tried[-1], NOT_FOUND)
        tried_paths = ', '.join(self.resolver.relative(p) for p in tried)
        self.logger.error(f"{path} => ??? (404, tried {tried_paths}: {last_error})")
        return self._error_response(method, 404, str(last_error), record)

    def _record(self, path, full_path, outcome, content_type=None, from_cache=False):
        return ResolutionRecord(path, full_path, self.resolver.relative(full_path),
                                outcome, content_type, from_cache)

    def _content_response(self, method, path, full_path, entry, from_cache):
        relative = self.resolver.relative(full_path)
        # '/' maps onto the default document without counting as a redirect
        redirected = relative != path and not (path == '/' and full_path == self.resolver.default_path)
        outcome = REDIRECTED if redirected else SERVED
        record = self._record(path, full_path, outcome, entry.content_type, from_cache)

        if from_cache:
            note = f"{entry.content_type}, cached"
        elif self.cache is not None:
            note = f"{entry.content_type}, added to cache"
        else:
            note = entry.content_type

        level = logging.WARNING if redirected else logging.INFO
        self.logger.log(level, f"{path} => {relative} ({note})")

        headers = {
            'Content-Type': entry.content_type,
            'Content-Length': str(len(entry.content))
        }
        body = b'' if method == 'HEAD' else entry.content
        return Response(200, headers, body, record)

    def _error_response(self, method, status_code, message, record):
        body = (message + '\n').encode('utf-8')
        headers = {
            'Content-Type': ERROR_CONTENT_TYPE,
            'Content-Length': str(len(body))
        }
        if method == 'HEAD':
            body = b''
        return Response(status_code, headers, body, record)

    def _parse_request(self, client_socket):
        """
        Parse the request line and headers from the client socket.

        Request bodies are not read.

        Args:
            client_socket: Client socket object

        Returns:
            dict: Parsed request or None if parsing failed
        """
        data = b''
        while b'\r\n\r\n' not in data:
            if len(data) > self.config.max_request_size:
                return None
            chunk = client_socket.recv(4096)
            if not chunk:
                # Tolerate clients that close right after the request line
                if b'\r\n' in data:
                    break
                return None
            data += chunk

        headers_text = data.split(b'\r\n\r\n', 1)[0].decode('latin-1')
        header_lines = headers_text.split('\r\n')

        request_parts = header_lines[0].split()
        if len(request_parts) != 3 or not request_parts[2].startswith('HTTP/'):
            return None

        method, target, http_version = request_parts
        request = {
            'method': method.upper(),
            'target': target,
            'path': parse_request_path(target),
            'http_version': http_version,
            'headers': {}
        }

        for header in header_lines[1:]:
            if ':' not in header:
                continue
            key, value = header.split(':', 1)
            request['headers'][key.strip().lower()] = value.strip()

        return request

    def _send_response(self, client_socket, response):
        """
        Write a response to the client.

        A client that went away mid-write is not an error; the response is
        dropped.

        Args:
            client_socket: Client socket object
            response: Response to send
        """
        status_message = HTTP_STATUS.get(response.status, 'Unknown')
        lines = [f"HTTP/1.1 {response.status} {status_message}"]
        lines.extend(f"{key}: {value}" for key, value in response.headers.items())
        lines.append('Connection: close')
        head = ('\r\n'.join(lines) + '\r\n\r\n').encode('latin-1')

        try:
            client_socket.sendall(head + response.body)
        except OSError as e:
            self.logger.debug(f"Unable to send response: {e}")


def parse_request_path(target):
    """
    Extract the decoded path from a request target.

    Query strings and fragments are dropped. Absolute-form targets
    ('http://host/path') are reduced to their path.

    Args:
        target: Request target from the request line

    Returns:
        str: Decoded path, always starting with '/'
    """
    if target == '*':
        return target
    if target.startswith('/'):
        # Origin-form; a leading '//' is part of the path, not an authority
        path = target.split('?', 1)[0]
    else:
        path = urllib.parse.urlsplit(target).path
    path = urllib.parse.unquote(path)
    if not path.startswith('/'):
        path = '/' + path
    return path
