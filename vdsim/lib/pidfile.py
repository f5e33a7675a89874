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
#
# *****************************************************************************
"""Define pidfile helpers

the simulator keeps one pidfile per device file in generalConfig.piddir
"""

from pathlib import Path

import psutil

from vdsim.lib import generalConfig


def pidfile_path(name):
    """the pidfile for a simulator named after its device file"""
    return Path(generalConfig.piddir) / (Path(name).stem + '.pid')


def read_pidfile(pidfile):
    """read the given pidfile, return the pid as an int

    or None upon errors (file not existing, garbage content)"""
    try:
        with open(pidfile, 'r', encoding='utf-8') as f:
            return int(f.read())
    except (OSError, ValueError):
        return None


def check_pidfile(pidfile):
    """check if the process from a given pidfile is still running"""
    pid = read_pidfile(pidfile)
    return False if pid is None else psutil.pid_exists(pid)
