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
"""test data types."""

# no fixtures needed
import math

import pytest

from vdsim.datatypes import BoolType, Float32Type, Float64Type, Int16Type, \
    Int32Type, Int64Type, StringType, Uint16Type, Uint32Type, format_float, \
    get_datatype
from vdsim.errors import ConfigError, UnparsableValueError, WrongTypeError


@pytest.mark.parametrize('dt, text, value', [
    (Int64Type(), '300', 300),
    (Int64Type(), '-5', -5),
    (Int64Type(), '0x1f', 31),
    (Int64Type(), 'ff', 255),
    (Int16Type(), '32767', 32767),
    (Uint16Type(), '65535', 65535),
    (Int32Type(), '-2147483648', -2147483648),
    (Uint32Type(), '4294967295', 4294967295),
    (Float64Type(), '3.3', 3.3),
    (Float64Type(), '1e5', 100000.0),
    (Float64Type(), '-2', -2.0),
    (BoolType(), 'true', True),
    (BoolType(), 'false', False),
    (StringType(), 'any text', 'any text'),
    (StringType(), '', ''),
])
def test_from_string(dt, text, value):
    assert dt.from_string(text) == value
    assert dt.convert(text) == value


@pytest.mark.parametrize('dt, text', [
    (Int64Type(), 'xyz'),
    (Int64Type(), '1.5'),
    (Int64Type(), ' 7'),
    (Int16Type(), '32768'),
    (Uint16Type(), '-1'),
    (Uint32Type(), '4294967296'),
    (Float64Type(), 'x1'),
    (Float64Type(), ''),
    (Float32Type(), '1e39'),
    (BoolType(), 'True'),
    (BoolType(), '1'),
])
def test_unparsable(dt, text):
    with pytest.raises(UnparsableValueError):
        dt.from_string(text)


@pytest.mark.parametrize('dt, value', [
    (Int64Type(), 1.0),
    (Int64Type(), True),
    (Int64Type(), None),
    (Int16Type(), 1 << 15),
    (Float64Type(), False),
    (Float64Type(), [1.0]),
    (BoolType(), 0),
    (StringType(), 5),
])
def test_wrong_type(dt, value):
    with pytest.raises(WrongTypeError):
        dt(value)


def test_float_accepts_int():
    assert Float64Type()(3) == 3.0
    assert isinstance(Float64Type().convert(3), float)


def test_float32_precision():
    dt = Float32Type()
    value = dt(3.3)
    assert value != 3.3
    assert abs(value - 3.3) < 1e-6
    assert dt.format_value(value) == '3.3'
    assert dt.format_value(dt(0.1)) == '0.1'
    assert dt.format_value(dt(300)) == '300'


@pytest.mark.parametrize('value, text', [
    (300.0, '300'),
    (3.3, '3.3'),
    (-0.5, '-0.5'),
    (0.0001, '0.0001'),
    (0.00001, '1e-05'),
    (1e20, '100000000000000000000'),
    (1e21, '1e+21'),
    (1.5e-7, '1.5e-07'),
    (math.inf, '+Inf'),
    (-math.inf, '-Inf'),
    (math.nan, 'NaN'),
])
def test_format_float(value, text):
    assert format_float(value) == text


def test_format_value():
    assert BoolType().format_value(True) == 'true'
    assert Int64Type().format_value(-3) == '-3'
    assert StringType().format_value('a b') == 'a b'


@pytest.mark.parametrize('typ, cls', [
    ('int', Int64Type),
    ('int64', Int64Type),
    ('byte', Int32Type),
    ('int16', Int16Type),
    ('uint32', Uint32Type),
    ('float', Float64Type),
    ('float32', Float32Type),
    ('string', StringType),
    ('bool', BoolType),
])
def test_get_datatype(typ, cls):
    assert get_datatype(typ) == cls()


@pytest.mark.parametrize('typ', ['double', '', None, 'Int'])
def test_get_datatype_unknown(typ):
    with pytest.raises(ConfigError):
        get_datatype(typ)
