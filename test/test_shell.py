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
"""test the command line interface"""

# false positive with fixtures
# pylint: disable=redefined-outer-name
import logging
import threading

import pytest

from vdsim.config import SAMPLE_CONFIG
from vdsim.protocol.interface.http import HTTPServer
from vdsim.shell import main


@pytest.fixture
def api(sample_device, log, monkeypatch):
    srv = HTTPServer('http', log, sample_device, '127.0.0.1:0')
    thread = threading.Thread(target=srv.serve_forever, kwargs={'poll_interval': 0.05})
    thread.start()
    monkeypatch.setenv('VD_API_ADDR', srv.address)
    yield srv
    srv.shutdown()
    srv.server_close()
    thread.join()


@pytest.mark.parametrize('args, output', [
    (['get', 'current'], '300'),
    (['get', 'mismatch'], 'Wrong query'),
    (['get', 'delay', 'get_psi'], '0s'),
    (['set', 'current', '20'], 'OK'),
    (['set', 'mismatch', 'What?'], 'OK'),
    (['set', 'delay', 'get_psi', '2s'], 'OK'),
])
def test_commands(api, capsys, args, output):
    assert main(args) == 0
    assert capsys.readouterr().out == output + '\n'


def test_set_get(api, capsys):
    assert main(['set', 'delay', 'get_psi', '1500ms']) == 0
    assert main(['get', 'delay', 'get_psi']) == 0
    assert main(['set', 'mode', 'BURS']) == 0
    assert main(['get', 'mode']) == 0
    assert capsys.readouterr().out.split() == ['OK', '1.5s', 'OK', 'BURS']
    assert api.device.get_parameter('mode') == 'BURS'


def test_api_addr_option(api, capsys, monkeypatch):
    address = api.address
    monkeypatch.setenv('VD_API_ADDR', 'localhost:1')
    assert main(['get', 'current', '--apiAddr', address]) == 0
    assert capsys.readouterr().out == '300\n'


@pytest.mark.parametrize('args, error', [
    (['get', 'voltage'], 'Error: parameter not found: voltage'),
    (['set', 'mode', 'FAST'], "Error: 'FAST' is not allowed"),
    (['trigger', 'get_psi'], 'Error: no client available'),
    (['get', 'delay'], 'Error: usage: vd get'),
    (['set', 'current'], 'Error: usage: vd set'),
    (['set', 'delay', 'get_psi'], 'Error: usage: vd set'),
    (['get', 'current', '-a', 'nohost'], 'Error: missing port'),
])
def test_errors(api, capsys, args, error):
    assert main(args) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith(error)


def test_trigger(api, capsys):
    api.device.attach_client()
    assert main(['trigger', 'get_current']) == 0
    assert capsys.readouterr().out == 'OK\n'
    assert api.device.get_triggered() == b'CUR 300\r\n'


def test_not_running(capsys, monkeypatch):
    monkeypatch.setenv('VD_API_ADDR', '127.0.0.1:1')
    assert main(['get', 'current']) == 1
    assert capsys.readouterr().err.startswith('Error: can not connect to 127.0.0.1:1')


def test_generate(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(['generate']) == 0
    assert capsys.readouterr().out == 'Writing vdfile config file example.toml\n'
    assert (tmp_path / 'example.toml').read_text() == SAMPLE_CONFIG
    assert main(['generate']) == 1
    assert capsys.readouterr().err.startswith('Error: ')
    assert main(['generate', '--force', '--random-delays']) == 0
    path = tmp_path / 'other.toml'
    assert main(['generate', '-o', str(path)]) == 0
    assert path.read_text() == SAMPLE_CONFIG


@pytest.mark.parametrize('argv, vdfile, listen_addr', [
    (['dev.toml'], 'dev.toml', None),
    (['serve', 'dev.toml'], 'dev.toml', None),
    (['dev.toml', '--listenAddr', 'localhost:5000'], 'dev.toml', 'localhost:5000'),
])
def test_serve_arguments(argv, vdfile, listen_addr, monkeypatch):
    calls = []
    monkeypatch.setattr('vdsim.shell.serve', calls.append)
    assert main(argv) == 0
    args, = calls
    assert args.vdfile == vdfile
    assert args.listen_addr == listen_addr
    assert not args.daemonize


def test_serve_missing_file(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr('vdsim.logging.logger.init', lambda level: None)
    monkeypatch.setattr('vdsim.logging.logger.log', logging.getLogger('vd'))
    assert main([str(tmp_path / 'missing.toml')]) == 1
    assert 'can not find device file' in capsys.readouterr().err


def test_usage():
    with pytest.raises(SystemExit):
        main(['get'])
    with pytest.raises(SystemExit):
        main(['bogus', 'args'])


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(['--version'])
    assert capsys.readouterr().out.startswith('vd ')
