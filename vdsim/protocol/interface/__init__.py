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
"""The common parts of the two service endpoints"""

import errno
import threading
import time

from vdsim.lib import closeSocket, generalConfig


class ConnectionClose(Exception):
    """Indicates that receive quit due to an error."""


class DrainingMixIn:
    """keeps track of the request threads of a threading socketserver

    on server_close, the running flag is cleared, and the handlers get
    drain_timeout seconds to finish. The sockets of the remaining ones
    are closed.
    """
    running = True
    drain_timeout = None

    def init_draining(self):
        self.running = True
        self._active = {}
        self._active_lock = threading.Lock()
        if self.drain_timeout is None:
            self.drain_timeout = float(generalConfig.drain_timeout)

    def process_request_thread(self, request, client_address):
        with self._active_lock:
            self._active[request] = threading.current_thread()
        try:
            super().process_request_thread(request, client_address)
        finally:
            with self._active_lock:
                self._active.pop(request, None)

    @property
    def active_count(self):
        with self._active_lock:
            return len(self._active)

    def drain(self):
        self.running = False
        deadline = time.monotonic() + self.drain_timeout
        with self._active_lock:
            threads = list(self._active.values())
        for thread in threads:
            thread.join(max(0, deadline - time.monotonic()))
        with self._active_lock:
            remaining = list(self._active)
        if remaining:
            self.log.warning('abandon %d handler(s) after %g sec', len(remaining), self.drain_timeout)
            for sock in remaining:
                closeSocket(sock)

    def server_close(self):
        self.drain()
        super().server_close()


def bind_with_retry(server, init, log, ntries=5):
    """call init (a server constructor binding its socket)

    retry when the address is still in use, a port might be blocked
    for a while after a previous server was closed
    """
    for ntry in range(ntries):
        try:
            init()
            break
        except OSError as e:
            if e.args[0] == errno.EADDRINUSE and ntry < ntries - 1:
                # max accumulated sleep time: 0.3 * 15 = 4.5 sec
                time.sleep(0.3 * (1 << ntry))
            else:
                log.error('could not initialize %s: %r', type(server).__name__, e)
                raise
    if ntry:
        log.warning('tried again %d times after "Address already in use"', ntry)
