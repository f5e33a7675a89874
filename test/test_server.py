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
# *****************************************************************************
"""test the simulator process"""

# false positive with fixtures
# pylint: disable=redefined-outer-name
import os
import socket
import threading
import time
from urllib.request import urlopen

import pytest

from vdsim.config import SAMPLE_CONFIG
from vdsim.errors import CommunicationFailedError, ConfigError
from vdsim.server import Server


@pytest.fixture
def vdfile(tmp_path, monkeypatch):
    monkeypatch.setattr('vdsim.server.signal.signal', lambda num, handler: None)
    path = tmp_path / 'example.toml'
    path.write_text(SAMPLE_CONFIG)
    return path


def make_server(vdfile, log, listen_addr='127.0.0.1:0', http_listen_addr='127.0.0.1:0'):
    return Server(str(vdfile), log, listen_addr=listen_addr, http_listen_addr=http_listen_addr)


def test_run(vdfile, log):
    srv = make_server(vdfile, log)
    thread = threading.Thread(target=srv.run)
    thread.start()
    deadline = time.monotonic() + 10
    while len(srv.interfaces) < 2:
        assert time.monotonic() < deadline
        time.sleep(0.01)
    with socket.create_connection(srv.interfaces['tcp'].server_address, timeout=5) as sock:
        sock.sendall(b'VER?\r\n')
        assert sock.recv(100) == b'version 1.0\r\n'
    with urlopen(f"http://{srv.interfaces['http'].address}/version", timeout=5) as reply:
        assert reply.read() == b'version 1.0'
    srv.shutdown()
    thread.join()


@pytest.mark.parametrize('addresses', [
    {'listen_addr': 'localhost'},
    {'http_listen_addr': 'local_host:80'},
])
def test_bad_address(vdfile, log, addresses):
    with pytest.raises(ConfigError):
        make_server(vdfile, log, **addresses)


def test_bad_vdfile(tmp_path, log):
    with pytest.raises(ConfigError):
        make_server(tmp_path / 'missing.toml', log)


def test_interface_failure(vdfile, log):
    # not a local address
    srv = make_server(vdfile, log, http_listen_addr='192.0.2.1:8080')
    with pytest.raises(CommunicationFailedError):
        srv.run()
    assert not srv.interfaces['tcp'].running


def test_already_running(vdfile, log, tmp_path):
    srv = make_server(vdfile, log)
    (tmp_path / 'example.pid').write_text(str(os.getpid()))
    with pytest.raises(ConfigError):
        srv.start()
