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
"""common fixtures"""

import tomllib

import pytest

from vdsim.config import SAMPLE_CONFIG, process_config
from vdsim.device import Device
from vdsim.lib import generalConfig


class LoggerStub:
    def debug(self, fmt, *args):
        pass
    info = warning = exception = error = log = debug
    handlers = []

    def getChild(self, name):
        return self


@pytest.fixture
def log():
    return LoggerStub()


def make_device(text, log=None):
    return Device(process_config(tomllib.loads(text)), log or LoggerStub())


@pytest.fixture
def sample_device(log):
    """the device of the example file, with all delays removed"""
    device = make_device(SAMPLE_CONFIG, log)
    for cmd in device.commands.values():
        cmd.delay = 0
    return device


@pytest.fixture(autouse=True)
def general_config(tmp_path):
    generalConfig.testinit(piddir=str(tmp_path), drain_timeout=1)
    yield generalConfig
    generalConfig._config = None
