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
"""the simulator process: a device with its stream and HTTP interfaces"""

import os
import signal
import threading

import mlzlog
from daemon import DaemonContext
from daemon import pidfile as pidlockfile

from vdsim.config import load_vdfile
from vdsim.device import Device
from vdsim.errors import CommunicationFailedError, ConfigError
from vdsim.lib import generalConfig, mkthread, parse_host_port
from vdsim.lib.pidfile import check_pidfile, pidfile_path
from vdsim.protocol.interface.http import HTTPServer
from vdsim.protocol.interface.tcp import TCPServer

# TCPServer might need up to 5 sec to wait for Address no longer in use
STARTUP_TIMEOUT = 12


class Server:
    INTERFACES = {
        'tcp': TCPServer,
        'http': HTTPServer,
    }

    def __init__(self, vdfile, parent_logger, *, listen_addr=None, http_listen_addr=None):
        """initialize server

        Arguments:
        - vdfile: the path of the device file
        - parent_logger: the logger to inherit from
        - listen_addr: '<host>:<port>' of the stream interface,
            default from generalConfig.listen_addr
        - http_listen_addr: '<host>:<port>' of the HTTP interface,
            default from generalConfig.http_listen_addr
        """
        name = os.path.splitext(os.path.basename(vdfile))[0]
        if isinstance(parent_logger, mlzlog.MLZLogger):
            self.log = parent_logger.getChild(name, True)
        else:
            self.log = parent_logger.getChild(name)
        self.addresses = {
            'tcp': listen_addr or generalConfig.listen_addr,
            'http': http_listen_addr or generalConfig.http_listen_addr,
        }
        for kind, address in self.addresses.items():
            try:
                parse_host_port(address)
            except ValueError as e:
                raise ConfigError(f'wrong {kind} address: {e}') from None
        self.device = Device(load_vdfile(vdfile), self.log.getChild('device'))
        self.interfaces = {}
        self._lock = threading.Lock()
        self._pidfile = pidfile_path(name)
        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

    def signal_handler(self, num, frame):
        if self.interfaces:
            self.shutdown()
        else:
            signal.default_int_handler(num, frame)

    def start(self):
        """run as a daemon"""
        piddir = self._pidfile.parent
        if not piddir.is_dir():
            piddir.mkdir(parents=True)
        if check_pidfile(self._pidfile):
            raise ConfigError(f'simulator already running, see {self._pidfile}')
        pidfile = pidlockfile.TimeoutPIDLockFile(self._pidfile)
        with DaemonContext(pidfile=pidfile, files_preserve=self.log.getLogfileStreams()):
            self.run()

    def run(self):
        for line in self.device.describe().splitlines():
            self.log.info(line)
        failed = {}
        started = []
        threads = []
        for kind in self.INTERFACES:
            event = threading.Event()
            started.append(event)
            threads.append(mkthread(self._interfaceThread, kind, failed, event))
        for event in started:
            event.wait(STARTUP_TIMEOUT)
        if failed or len(self.interfaces) < len(self.INTERFACES):
            self.shutdown()
            for t in threads:
                t.join()
            for kind, err in failed.items():
                self.log.error('starting %s interface failed with %r', kind, err)
            raise CommunicationFailedError(
                f"could not start interface(s) {', '.join(k for k in self.INTERFACES if k not in self.interfaces)}")
        self.log.info('vd running on %s, HTTP API on http://%s',
                      self.interfaces['tcp'].address, self.interfaces['http'].address)

        # we wait here on the threads finishing, which means we got a
        # signal to shut down or an exception was raised
        for t in threads:
            t.join()
        if failed:
            for kind, err in failed.items():
                self.log.error('%s interface failed with %r', kind, err)
            raise CommunicationFailedError(f"interface(s) failed: {', '.join(failed)}")
        self.log.info('vd stopped')

    def shutdown(self):
        with self._lock:
            interfaces = list(self.interfaces.values())
        for iface in interfaces:
            iface.shutdown()

    def _interfaceThread(self, kind, failed, started):
        cls = self.INTERFACES[kind]
        try:
            with cls(kind, self.log.getChild(kind), self.device, self.addresses[kind]) as interface:
                with self._lock:
                    self.interfaces[kind] = interface
                started.set()
                interface.serve_forever()
                # server_close() called by 'with'
        except Exception as e:
            with self._lock:
                failed[kind] = e
            started.set()
            # do not keep the other interface running alone
            self.shutdown()
            return
        self.log.info('stopped %s interface', kind)
