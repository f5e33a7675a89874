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
"""Define the parameters of a device"""

import threading

from vdsim.datatypes import DataType, shortrepr
from vdsim.errors import NotAllowedError, ProgrammingError


class Parameter:
    """a named, typed value cell

    :param name: the parameter name
    :param datatype: the kind, an instance of a DataType
    :param value: the initial value, in the python type of the kind or as a string
    :param options: the allowed values (same kind or strings), empty means unconstrained

    the value is guarded by a lock of its own, a write either succeeds
    completely or leaves the previous value
    """

    def __init__(self, name, datatype, value, options=()):
        if not isinstance(datatype, DataType):
            raise ProgrammingError(f'datatype of parameter {name} must be a DataType')
        self.name = name
        self.datatype = datatype
        self._lock = threading.Lock()
        self.options = tuple(datatype.convert(v) for v in options)
        self._value = self.check(value)

    @property
    def kind(self):
        return self.datatype.name

    @property
    def value(self):
        with self._lock:
            return self._value

    def check(self, value):
        """convert value into the kind and check it against the options

        returns the converted value, without storing it
        """
        value = self.datatype.convert(value)
        if self.options and value not in self.options:
            raise NotAllowedError(
                f'{shortrepr(value)} is not allowed for {self.name}, allowed values: '
                f"{', '.join(self.datatype.format_value(v) for v in self.options)}")
        return value

    def set(self, value):
        """convert, check and store the value, return the stored value"""
        value = self.check(value)
        with self._lock:
            self._value = value
        return value

    def format_value(self, value=None):
        """the current (or given) value as text"""
        return self.datatype.format_value(self.value if value is None else value)

    def __repr__(self):
        return f'Parameter({self.name!r}, {self.datatype!r}, {self.value!r})'
