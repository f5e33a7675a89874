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
"""Define the scalar kinds of the device parameters.

Each kind is a datatype object:

- calling it validates a value which already has the right python type
  (``__call__``), raising WrongTypeError otherwise
- ``from_string`` coerces text as received on the wire or given by an operator,
  raising UnparsableValueError
- ``format_value`` renders a value as text for the control plane
"""

import math
import struct
from decimal import Decimal

from vdsim.errors import ConfigError, UnparsableValueError, WrongTypeError


def shortrepr(value):
    """shortened repr for error messages

    avoid lengthy error message in case a value is too complex
    """
    r = repr(value)
    if len(r) > 40:
        return r[:40] + '...'
    return r


def format_float(value, digits=None):
    """format a float like the %v verb of Go

    shortest representation, exponent only below 1e-4 or from 1e21 on
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return '+Inf' if value > 0 else '-Inf'
    dec = Decimal(digits or repr(value)).normalize()
    sign, mantissa, exponent = dec.as_tuple()
    exp10 = len(mantissa) + exponent - 1
    if -4 <= exp10 < 21:
        return format(dec, 'f')
    text = ''.join(str(d) for d in mantissa)
    if len(text) > 1:
        text = f'{text[0]}.{text[1:]}'
    return f"{'-' if sign else ''}{text}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"


class DataType:
    """base class for all scalar kinds"""
    name = None
    default = None

    def __call__(self, value):
        """validate a value already of the python type of this kind"""
        raise NotImplementedError

    def from_string(self, text):
        """interprets a given string and returns a validated (internal) value"""
        raise NotImplementedError

    def format_value(self, value):
        """format a value of this type into a str string"""
        return str(value)

    def convert(self, value):
        """convert any accepted input

        values of the python type of the kind are validated, strings are parsed,
        anything else is a wrong type
        """
        if isinstance(value, str) and not isinstance(self, StringType):
            return self.from_string(value)
        return self(value)

    def __repr__(self):
        return f'{type(self).__name__}()'

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))


class IntType(DataType):
    """fixed width integer

    the limits are given by the class attributes ``min`` and ``max``
    """
    min = max = 0
    default = 0

    def __call__(self, value):
        # bool is a subclass of int, but not of the same kind
        if not isinstance(value, int) or isinstance(value, bool):
            raise WrongTypeError(f'{shortrepr(value)} is not an {self.name}')
        if self.min <= value <= self.max:
            return value
        raise WrongTypeError(f'{value} does not fit into an {self.name}')

    def from_string(self, text):
        """decimal, then hex without prefix, then with 0x prefix"""
        if text == text.strip():
            for base in (10, 16, 0):
                try:
                    value = int(text, base)
                    break
                except ValueError:
                    pass
            else:
                value = None
            if value is not None and self.min <= value <= self.max:
                return value
        raise UnparsableValueError(f'{shortrepr(text)} is not a valid {self.name}')


class Int16Type(IntType):
    name = 'int16'
    min = -1 << 15
    max = (1 << 15) - 1


class Uint16Type(IntType):
    name = 'uint16'
    min = 0
    max = (1 << 16) - 1


class Int32Type(IntType):
    name = 'int32'
    min = -1 << 31
    max = (1 << 31) - 1


class Uint32Type(IntType):
    name = 'uint32'
    min = 0
    max = (1 << 32) - 1


class Int64Type(IntType):
    name = 'int64'
    min = -1 << 63
    max = (1 << 63) - 1


class Float64Type(DataType):
    name = 'float64'
    default = 0.0

    def __call__(self, value):
        """accepts floats and, losslessly widened, ints"""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise WrongTypeError(f'{shortrepr(value)} is not a {self.name}')
        return float(value)

    def from_string(self, text):
        try:
            if text == text.strip():
                return self(float(text))
        except ValueError:
            pass
        raise UnparsableValueError(f'{shortrepr(text)} is not a valid {self.name}')

    def format_value(self, value):
        return format_float(value)


class Float32Type(Float64Type):
    """single precision float

    values are stored as python floats, rounded to single precision
    """
    name = 'float32'

    def __call__(self, value):
        value = super().__call__(value)
        try:
            return struct.unpack('<f', struct.pack('<f', value))[0]
        except OverflowError:
            raise WrongTypeError(f'{shortrepr(value)} does not fit into a {self.name}') from None

    def from_string(self, text):
        try:
            return super().from_string(text)
        except WrongTypeError:
            raise UnparsableValueError(f'{shortrepr(text)} is out of range for a {self.name}') from None

    def format_value(self, value):
        if not math.isfinite(value):
            return format_float(value)
        # shortest digits surviving the round trip through single precision
        for precision in range(1, 10):
            digits = f'{value:.{precision}g}'
            if self(float(digits)) == value:
                return format_float(value, digits)
        return format_float(value)


class BoolType(DataType):
    name = 'bool'
    default = False

    def __call__(self, value):
        if not isinstance(value, bool):
            raise WrongTypeError(f'{shortrepr(value)} is not a boolean value')
        return value

    def from_string(self, text):
        """only the literals 'true' and 'false' are accepted"""
        if text == 'true':
            return True
        if text == 'false':
            return False
        raise UnparsableValueError(f'{shortrepr(text)} is not a valid bool')

    def format_value(self, value):
        return 'true' if value else 'false'


class StringType(DataType):
    name = 'string'
    default = ''

    def __call__(self, value):
        """accepts strings only"""
        if not isinstance(value, str):
            raise WrongTypeError(f'{shortrepr(value)} is not a string')
        return value

    def from_string(self, text):
        return self(text)


# config names of the kinds
DATATYPES = {
    'byte': Int32Type,
    'int16': Int16Type,
    'uint16': Uint16Type,
    'int32': Int32Type,
    'uint32': Uint32Type,
    'int': Int64Type,
    'int64': Int64Type,
    'float32': Float32Type,
    'float': Float64Type,
    'float64': Float64Type,
    'string': StringType,
    'bool': BoolType,
}


def get_datatype(typ):
    """get the datatype for a ``typ`` entry of the device file"""
    try:
        return DATATYPES[typ]()
    except (KeyError, TypeError):
        raise ConfigError(f'unknown parameter type {typ!r}, must be one of '
                          f"{', '.join(DATATYPES)}") from None
