# *****************************************************************************
#
# This program is free software; you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation; either version 2 of the License, or (at your option) any later
# version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
# details.
#
# You should have received a copy of the GNU General Public License along with
# this program; if not, write to the Free Software Foundation, Inc.,
# 59 Temple Place, Suite 330, Boston, MA  02111-1307  USA
#
# Module authors:
#   Enrico Faulhaber <enrico.faulhaber@frm2.tum.de>
#   Markus Zolliker <markus.zolliker@psi.ch>
#
# *****************************************************************************
"""TCP interface of the device: the raw byte stream"""

import os
import socket
import socketserver
import threading

from vdsim.lib import closeSocket, format_address, formatException, parse_host_port
from vdsim.protocol.interface import ConnectionClose, DrainingMixIn, bind_with_retry

MESSAGE_READ_SIZE = 4096
# a pending triggered response is sent after at most this time
POLL_INTERVAL = 0.1


class TCPRequestHandler(socketserver.BaseRequestHandler):
    """Handles one stream client

    every chunk of received data is handed to the device, the reply is
    sent back before the next chunk is read
    """

    def setup(self):
        self.log = self.server.log
        self.device = self.server.device
        self.running = True
        self.send_lock = threading.Lock()
        self.request.settimeout(POLL_INTERVAL)
        self.device.attach_client()
        self.log.info('new connection %s', self.format())

    def handle(self):
        while self.running and self.server.running:
            triggered = self.device.get_triggered()
            if triggered:
                self.send_reply(triggered)
            try:
                data = self.receive()
            except ConnectionClose:
                return
            if data is None:
                continue
            try:
                reply = self.device.handle(data)
            except Exception:
                self.log.error('error handling %r:\n%s', data, formatException())
                continue
            if reply:
                self.send_reply(reply)

    def finish(self):
        """called when handle() terminates, i.e. the socket closed"""
        self.device.detach_client()
        self.log.info('closing connection %s', self.format())
        closeSocket(self.request)

    def receive(self):
        """the received data or None on timeout"""
        try:
            data = self.request.recv(MESSAGE_READ_SIZE)
        except socket.timeout:
            return None
        except OSError as e:
            if self.server.running:
                self.log.error('receive failed: %r', e)
            raise ConnectionClose() from e
        if not data:
            raise ConnectionClose('socket was closed')
        return data

    def send_reply(self, data):
        """send reply

        stops recv loop on error
        """
        with self.send_lock:
            if self.running:
                try:
                    self.request.sendall(data)
                except OSError as e:
                    self.log.debug('send_reply got an %r, connection closed?', e)
                    self.running = False

    def format(self):
        return f'from {format_address(self.client_address)}'


class TCPServer(DrainingMixIn, socketserver.ThreadingTCPServer):
    daemon_threads = True
    # on windows, 'reuse_address' means that several servers might listen on
    # the same port, on the other hand, a port is not blocked after closing
    allow_reuse_address = os.name != 'nt'  # False on Windows systems

    def __init__(self, name, logger, device, address):
        """the listener for stream clients

        :param name: the name of the interface
        :param logger: the logger
        :param device: the Device handling the data
        :param address: '<host>:<port>', port 0 means any free port
        """
        self.name = name
        self.log = logger
        self.device = device
        host, port = parse_host_port(address)
        self.init_draining()
        self.log.info('TCPServer %s binding to %s', name, address)
        bind_with_retry(self, lambda: socketserver.ThreadingTCPServer.__init__(
            self, (host, port), TCPRequestHandler), self.log)
        self.log.info('TCPServer listening on %s', self.address)

    @property
    def address(self):
        return format_address(self.server_address)
