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
"""test helpers"""

import os

import pytest

from vdsim.lib import GeneralConfig, format_address, parse_host_port
from vdsim.lib.pidfile import check_pidfile, pidfile_path, read_pidfile
from vdsim.version import translate_version


@pytest.mark.parametrize('hostport, result', [
    ('box.psi.ch:9999', ('box.psi.ch', 9999)),
    ('/dev/tty:9999', None),
    ('localhost:10767', ('localhost', 10767)),
    ('localhost:0', ('localhost', 0)),
    ('www.psi.ch', None),
    ('COM4:', None),
    ('123.hyphen-valid.com:80', ('123.hyphen-valid.com', 80)),
    ('underscore_invalid.123.hyphen-valid.com:10000', None),
    ('127.0.0.1:50', ('127.0.0.1', 50)),
    ('234.40.128.3:13212', ('234.40.128.3', 13212)),
    ('127.0.0.1:65536', None),
    ('127.0.0.1:http', None),
])
def test_parse_host(hostport, result):
    if result is None:
        with pytest.raises(ValueError):
            parse_host_port(hostport)
    else:
        assert result == parse_host_port(hostport)


@pytest.mark.parametrize('addr, result', [
    (('127.0.0.1', 8080), '127.0.0.1:8080'),
    (('::ffff:127.0.0.1', 8080, 0, 0), '127.0.0.1:8080'),
    (('::1', 9999, 0, 0), '[::1]:9999'),
])
def test_format_address(addr, result):
    assert format_address(addr) == result


def test_general_config(tmp_path, monkeypatch):
    cfgfile = tmp_path / 'vd.cfg'
    cfgfile.write_text('[VD]\nlisten_addr = 0.0.0.0:5000\napi_addr = box:80\n')
    monkeypatch.setenv('VD_API_ADDR', 'other:81')
    monkeypatch.delenv('VD_LISTEN_ADDR', raising=False)
    config = GeneralConfig()
    config.set_default('listen_addr', 'localhost:1')
    config.set_default('drain_timeout', 5)
    with pytest.raises(TypeError):
        config['piddir']  # pylint: disable=pointless-statement
    assert config.listen_addr == 'localhost:1'
    config.init(str(cfgfile))
    assert config.listen_addr == '0.0.0.0:5000'
    assert config.api_addr == 'other:81'
    assert config.getfloat('drain_timeout') == 5.0
    assert config.piddir == '/tmp/vd'
    assert config.get('unknown', 'x') == 'x'
    assert config.unknown is None


def test_config_file_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv('VD_CONFIG_FILE', str(tmp_path / 'missing.cfg'))
    with pytest.raises(FileNotFoundError):
        GeneralConfig().init()


def test_pidfile(tmp_path, general_config):
    general_config.testinit(piddir=str(tmp_path))
    path = pidfile_path('cfg/example.toml')
    assert path == tmp_path / 'example.pid'
    assert read_pidfile(path) is None
    assert not check_pidfile(path)
    path.write_text('garbage')
    assert read_pidfile(path) is None
    path.write_text(str(os.getpid()))
    assert read_pidfile(path) == os.getpid()
    assert check_pidfile(path)


@pytest.mark.parametrize('described, version', [
    ('v0.2.0-5-gabcd', '0.2.0.post5+gabcd'),
    ('v0.2.0', '0.2.0'),
    ('1.0-rc1', '1.0'),
])
def test_translate_version(described, version):
    assert translate_version(described) == version
