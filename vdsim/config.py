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
#   Alexander Zaft <a.zaft@fz-juelich.de>
#
# *****************************************************************************
"""loading of device files

A device file is a TOML document::

    mismatch = "Wrong query"

    [terminators]
    intterm = "CR LF"
    outterm = "CR LF"

    [[parameter]]
    name = "current"
    typ = "int"
    val = 300

    [[command]]
    name = "get_current"
    req = "CUR?"
    res = "CUR {%d:current}"
    dly = "100ms"
"""

import random
import tomllib
from pathlib import Path

from vdsim.datatypes import get_datatype
from vdsim.device import Command, check_mismatch
from vdsim.errors import BadValueError, ConfigError, InvalidDurationError, \
    MismatchTooLongError
from vdsim.lib.duration import parse_duration
from vdsim.params import Parameter

# ASCII control mnemonics allowed in terminators
CONTROL_CHARS = {
    'NUL': 0x00, 'SOH': 0x01, 'STX': 0x02, 'ETX': 0x03, 'EOT': 0x04,
    'ENQ': 0x05, 'ACK': 0x06, 'BEL': 0x07, 'BS': 0x08, 'HT': 0x09, 'TAB': 0x09,
    'LF': 0x0A, 'NL': 0x0A, 'VT': 0x0B, 'FF': 0x0C, 'NP': 0x0C,
    'CR': 0x0D, 'SO': 0x0E, 'SI': 0x0F, 'DLE': 0x10, 'DC1': 0x11,
    'DC2': 0x12, 'DC3': 0x13, 'DC4': 0x14, 'NAK': 0x15, 'SYN': 0x16,
    'ETB': 0x17, 'CAN': 0x18, 'EM': 0x19, 'SUB': 0x1A, 'ESC': 0x1B,
    'FS': 0x1C, 'GS': 0x1D, 'RS': 0x1E, 'US': 0x1F, 'DEL': 0x7F,
}


def parse_terminator(text):
    """convert 'CR LF' like terminator texts into bytes

    tokens not in the mnemonic table are taken literally
    """
    result = bytearray()
    for token in (text or '').split():
        code = CONTROL_CHARS.get(token.upper())
        if code is None:
            result += token.encode('utf-8')
        else:
            result.append(code)
    return bytes(result)


class VDFile:
    """the content of a device file

    :param parameters: dict name -> Parameter
    :param commands: dict name -> Command
    """

    def __init__(self, parameters=None, commands=None, interm=b'', outterm=b'', mismatch=b''):
        self.parameters = parameters or {}
        self.commands = commands or {}
        self.interm = interm
        self.outterm = outterm
        self.mismatch = mismatch

    def __repr__(self):
        return (f'VDFile(parameters={list(self.parameters)}, commands={list(self.commands)}, '
                f'interm={self.interm!r}, outterm={self.outterm!r}, mismatch={self.mismatch!r})')


def _records(cfg, key):
    records = cfg.get(key, [])
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ConfigError(f'{key} must be an array of tables ([[{key}]])')
    return records


def _name(record, key):
    name = record.get('name')
    if not name or not isinstance(name, str):
        raise ConfigError(f'{key} without name: {record!r}')
    return name


def make_parameter(record):
    name = _name(record, 'parameter')
    datatype = get_datatype(record.get('typ'))
    options = record.get('opt') or []
    if isinstance(options, str):
        options = options.split('|')
    try:
        return Parameter(name, datatype, record.get('val', datatype.default), options)
    except BadValueError as e:
        raise ConfigError(f'failed initializing parameter {name}: {e}') from None


def make_command(record):
    name = _name(record, 'command')
    try:
        delay = parse_duration(record['dly']) if record.get('dly') else 0.0
    except InvalidDurationError as e:
        raise ConfigError(f'command {name}: {e}') from None
    request = record.get('req')
    if not request or not isinstance(request, str):
        raise ConfigError(f'command {name}: missing req')
    response = record.get('res') or ''
    if not isinstance(response, str):
        raise ConfigError(f'command {name}: res must be a string')
    return Command(name, request, response, delay)


def process_config(cfg):
    """create a VDFile from the decoded TOML document"""
    terminators = cfg.get('terminators', {})
    if not isinstance(terminators, dict):
        raise ConfigError('terminators must be a table')
    interm = terminators.get('intterm', terminators.get('interm',
                             cfg.get('intterm', cfg.get('interm', ''))))
    outterm = terminators.get('outterm', cfg.get('outterm', ''))

    parameters = {}
    for record in _records(cfg, 'parameter'):
        param = make_parameter(record)
        if param.name in parameters:
            raise ConfigError(f'{param.name} name is duplicated')
        parameters[param.name] = param

    commands = {}
    for record in _records(cfg, 'command'):
        cmd = make_command(record)
        if cmd.name in commands:
            raise ConfigError(f'{cmd.name} name is duplicated')
        commands[cmd.name] = cmd

    mismatch = cfg.get('mismatch', '')
    if not isinstance(mismatch, str):
        raise ConfigError('mismatch must be a string')
    try:
        mismatch = check_mismatch(mismatch)
    except MismatchTooLongError as e:
        raise ConfigError(f'mismatch: {e}') from None
    return VDFile(parameters, commands, parse_terminator(interm), parse_terminator(outterm),
                  mismatch)


def load_vdfile(path):
    """read and process a device file

    all problems are reported as ConfigError
    """
    try:
        with open(path, 'rb') as f:
            cfg = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f'can not find device file {path}') from None
    except OSError as e:
        raise ConfigError(f'can not read device file {path}: {e}') from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f'failed decoding {path}: {e}') from None
    return process_config(cfg)


SAMPLE_PARAMETERS = """
[[parameter]]
name = "current"
typ = "int"
val = 300

[[parameter]]
name = "psi"
typ = "float32"
val = 3.30

[[parameter]]
name = "version"
typ = "string"
val = "version 1.0"

[[parameter]]
name = "mode"
typ = "string"
opt = "NORM|SING|BURS|DCYC"
val = "NORM"
"""

# name, req, res, dly
SAMPLE_COMMANDS = [
    ('get_current', 'CUR?', 'CUR {%d:current}', '1s'),
    ('set_current', 'CUR {%d:current}', 'OK', '100ms'),
    ('get_psi', 'PSI?', 'PSI {%3.2f:psi}', ''),
    ('set_psi', 'PSI {%3.2f:psi}', 'PSI {%3.2f:psi} OK', ''),
    ('get_version', 'VER?', '{%s:version}', ''),
    ('get_mode', ':PULSE0:MODE?', '{%s:mode}', ''),
    ('set_mode', ':PULSE0:MODE {%s:mode}', 'ok', ''),
    ('get_status', 'S?', '{%s:version} - {%s:mode}', ''),
]


def sample_config(random_delays=False):
    """the text of the example device file"""
    lines = [
        '# This is vdfile config',
        '',
        'mismatch = "Wrong query"',
        '',
        '[terminators]',
        'intterm = "CR LF"',
        'outterm = "CR LF"',
        SAMPLE_PARAMETERS,
    ]
    for name, req, res, dly in SAMPLE_COMMANDS:
        if random_delays:
            dly = f'{random.randrange(10)}s'
        lines += ['[[command]]', f'name = "{name}"', f'req = "{req}"', f'res = "{res}"']
        if dly:
            lines.append(f'dly = "{dly}"')
        lines.append('')
    return '\n'.join(lines)


SAMPLE_CONFIG = sample_config()
SAMPLE_FILENAME = 'example.toml'


def write_sample_config(path=None, force=False, random_delays=False):
    """write the example device file, by default example.toml in the current directory

    an existing file is only overwritten with force=True
    """
    path = Path(path or SAMPLE_FILENAME)
    with open(path, 'w' if force else 'x', encoding='utf-8') as f:
        f.write(sample_config(random_delays))
    return path
