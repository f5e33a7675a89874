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
"""transactions: what the protocol engine decoded from one frame"""

from enum import Enum


class TransactionType(Enum):
    GET = 'get'
    SET = 'set'
    MISMATCH = 'mismatch'
    UNKNOWN = 'unknown'


class Transaction:
    """the decoded meaning of one frame

    :param type: a TransactionType
    :param command: the name of the matched command, '' when nothing matched
    :param payload: dict parameter name -> value

    after decoding, the payload of a SET holds the captured strings, and
    None for the parameters only appearing in the response. Before encoding,
    the device replaces all of them by the current typed values.
    """

    def __init__(self, type, command='', payload=None):  # pylint: disable=redefined-builtin
        self.type = type
        self.command = command
        self.payload = {} if payload is None else payload

    def __repr__(self):
        return f'Transaction({self.type.name}, {self.command!r}, {self.payload!r})'

    def __eq__(self, other):
        if not isinstance(other, Transaction):
            return NotImplemented
        return (self.type, self.command, self.payload) == (other.type, other.command, other.payload)
