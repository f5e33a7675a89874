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
"""test logging setup"""

# false positive with fixtures
# pylint: disable=redefined-outer-name
import logging

import mlzlog
import pytest

from vdsim.logging import COMLOG, RX, TX, check_level, comlog, logger, printable


@pytest.mark.parametrize('level, result', [
    ('debug', logging.DEBUG),
    ('COMLOG', COMLOG),
    ('info', logging.INFO),
    ('off', 99),
    (logging.ERROR, logging.ERROR),
])
def test_check_level(level, result):
    assert check_level(level) == result


@pytest.mark.parametrize('level', ['verbose', 17, None])
def test_check_level_invalid(level):
    with pytest.raises(ValueError):
        check_level(level)


def test_printable():
    assert printable(b'CUR 300\r\n') == 'CUR 300'
    assert printable(b'\x02A\x03') == 'A'


class RecordHandler(mlzlog.Handler):
    def __init__(self, *args, **kwds):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def init(monkeypatch):
    handlers = {}

    def console(*args, **kwds):
        handlers['console'] = RecordHandler()
        return handlers['console']

    def logfile_init(self, *args, **kwds):
        logging.Handler.__init__(self)  # pylint: disable=non-parent-init-called
        handlers['logfile'] = self
        self.stream = None
        self.disabled = False
        self.records = []

    def logfile_emit(self, record):
        self.records.append(record)

    monkeypatch.setattr(mlzlog, 'ColoredConsoleHandler', console)
    monkeypatch.setattr(mlzlog.LogfileHandler, '__init__', logfile_init)
    monkeypatch.setattr(mlzlog.LogfileHandler, 'emit', logfile_emit)

    def do_init(console_level):
        # pylint: disable=unnecessary-dunder-call
        logger.__init__()
        logger.init(console_level)
        return handlers

    yield do_init
    if logger.log:
        for handler in list(logger.log.handlers):
            logger.log.removeHandler(handler)
    logger.__init__()  # pylint: disable=unnecessary-dunder-call


def messages(handler):
    return [(r.name, r.levelno, r.getMessage()) for r in handler.records
            if handler.level <= r.levelno]


def test_console_only(init):
    handlers = init('comlog')
    assert 'logfile' not in handlers
    log = logger.log.getChild('dev')
    comlog(log, RX, b'CUR?\r\n')
    log.debug('hidden')
    log.info('CUR = %d', 20)
    assert messages(handlers['console']) == [
        ('vd.dev', COMLOG, '--> CUR? [43 55 52 3f 0d 0a]'),
        ('vd.dev', logging.INFO, 'CUR = 20'),
    ]


def test_logfile(init, general_config, tmp_path):
    general_config.testinit(logdir=str(tmp_path), logfile_level='debug')
    handlers = init('info')
    log = logger.log.getChild('dev')
    comlog(log, TX, b'OK\r\n')
    log.debug('details')
    log.warning('careful')
    assert [m[2] for m in messages(handlers['logfile'])] == ['details', 'careful']
    assert [m[2] for m in messages(handlers['console'])] == ['careful']
