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
"""durations in the notation of the device files: '1.5s', '1m30s', '500ms'"""

import re

from vdsim.errors import InvalidDurationError

# seconds per unit
DURATION_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,  # micro sign
    'μs': 1e-6,  # greek mu
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}
DURATION_PART = re.compile(r'(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)')


def parse_duration(text):
    """parse a duration like '1.5s', '1m30s' or '500ms'

    :return: the duration in seconds
    """
    if not isinstance(text, str):
        raise InvalidDurationError(f'invalid duration {text!r}')
    body = text[1:] if text[:1] == '+' else text
    if body == '0':
        return 0.0
    if not body:
        raise InvalidDurationError(f'invalid duration {text!r}')
    pos = 0
    seconds = 0.0
    while pos < len(body):
        match = DURATION_PART.match(body, pos)
        if not match:
            raise InvalidDurationError(f'invalid duration {text!r}')
        seconds += float(match.group(1)) * DURATION_UNITS[match.group(2)]
        pos = match.end()
    return seconds


def _fraction(value, unit):
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = str(frac).rjust(len(str(unit)) - 1, '0').rstrip('0')
    return f'{whole}.{digits}'


def format_duration(seconds):
    """canonical text of a duration in seconds: '2s', '150ms', '1m30s', '0s'"""
    ns = round(seconds * 1e9)
    if ns == 0:
        return '0s'
    sign = '-' if ns < 0 else ''
    ns = abs(ns)
    if ns < 1000:
        return f'{sign}{ns}ns'
    if ns < 1000_000:
        return f'{sign}{_fraction(ns, 1000)}µs'
    if ns < 1000_000_000:
        return f'{sign}{_fraction(ns, 1000_000)}ms'
    hours, ns = divmod(ns, 3600_000_000_000)
    minutes, ns = divmod(ns, 60_000_000_000)
    text = f'{_fraction(ns, 1000_000_000)}s'
    if hours or minutes:
        text = f'{minutes}m{text}'
    if hours:
        text = f'{hours}h{text}'
    return sign + text
