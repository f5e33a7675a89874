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
#   Markus Zolliker <markus.zolliker@psi.ch>
#
# *****************************************************************************
"""logging setup of the simulator

wire traffic is logged on the extra level COMLOG, which is between DEBUG
and INFO. It never goes to the log files, only to the console.
"""

import os
from logging import DEBUG, INFO, addLevelName
from os.path import dirname

import mlzlog

from vdsim.lib import generalConfig

OFF = 99
COMLOG = 15
addLevelName(COMLOG, 'COMLOG')
assert DEBUG < COMLOG < INFO
LOG_LEVELS = dict(mlzlog.LOGLEVELS, off=OFF, comlog=COMLOG)
LEVEL_NAMES = {v: k for k, v in LOG_LEVELS.items()}

RX = '-->'
TX = '<--'


def check_level(level):
    try:
        if isinstance(level, str):
            return LOG_LEVELS[level.lower()]
        if level in LEVEL_NAMES:
            return level
    except KeyError:
        pass
    raise ValueError(f'{level!r} is not a valid level')


def printable(data):
    """the printable part of a wire frame"""
    return ''.join(c for c in data.decode('latin-1') if c.isprintable())


def comlog(log, direction, data):
    """log a received (RX) or transmitted (TX) frame with its hex dump"""
    log.log(COMLOG, '%s %s [%s]', direction, printable(data), data.hex(' '))


class LogfileHandler(mlzlog.LogfileHandler):

    def __init__(self, logdir, rootname, max_days=0):
        self.rootname = rootname
        self.max_days = max_days
        super().__init__(logdir, rootname)

    def emit(self, record):
        if record.levelno != COMLOG:
            super().emit(record)

    def doRollover(self):
        super().doRollover()
        if self.max_days:
            # keep only the last max_days files
            with os.scandir(dirname(self.baseFilename)) as it:
                files = sorted(entry.path for entry in it if entry.name != 'current')
            for filepath in files[:-self.max_days]:
                os.remove(filepath)


class MainLogger:
    def __init__(self):
        self.log = None
        self.logdir = None
        self.rootname = None
        self.console_handler = None

    def init(self, console_level='info'):
        self.rootname = generalConfig.get('logger_root', 'vd')
        # set log level to minimum on the logger, effective levels on the handlers
        # modified from mlzlog.initLogging
        mlzlog.setLoggerClass(mlzlog.MLZLogger)
        assert self.log is None
        self.log = mlzlog.log = mlzlog.MLZLogger(self.rootname)

        self.log.setLevel(DEBUG)
        self.console_handler = mlzlog.ColoredConsoleHandler()
        self.console_handler.setLevel(check_level(console_level))
        self.log.addHandler(self.console_handler)

        self.logdir = generalConfig.get('logdir')
        if self.logdir:
            logfile_days = int(generalConfig.get('logfile_days', 0))
            logfile_handler = LogfileHandler(self.logdir, self.rootname, max_days=logfile_days)
            logfile_handler.setLevel(check_level(generalConfig.get('logfile_level', 'info')))
            self.log.addHandler(logfile_handler)


logger = MainLogger()
