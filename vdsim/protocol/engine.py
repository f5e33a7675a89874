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
"""the stream protocol engine

decode: bytes -> frames -> transactions
encode: transactions (with typed values in the payload) -> bytes

The engine does not touch the parameters, this is left to the device.
"""

import re

from vdsim.datatypes import format_float
from vdsim.errors import RequestSyntaxError, ResponseSyntaxError
from vdsim.protocol.lexer import TokenType, lex_template
from vdsim.protocol.messages import Transaction, TransactionType

ENCODING = 'utf-8'

VERBATIM = {TokenType.LITERAL, TokenType.WHITESPACE, TokenType.ESCAPE}
PLACEHOLDERS = {TokenType.NUMBER, TokenType.STRING}

SIGN = '+-'
DECIMAL = '0123456789'
HEX = '0123456789abcdefABCDEF'
# no 'e' and 'E' here: 1e5 is a float, not a hex number
BARE_HEX = '0123456789abcdfABCDF'


def is_alnum(ch):
    """characters which must not follow a number"""
    return bool(ch) and ch.isascii() and (ch.isalnum() or ch in '_+-')


def parse_number(text, pos=0):
    """scan a number in text starting at pos

    accepted are an optional sign, followed by hex digits with 0x prefix,
    hex digits without prefix or a decimal int or float with optional
    exponent and an optional imaginary suffix 'i'.

    :return: the end position of the number, pos when there is no number
    """
    end = len(text)
    start = pos

    def peek():
        return text[pos] if pos < end else ''

    def accept(chars):
        nonlocal pos
        if pos < end and text[pos] in chars:
            pos += 1
            return True
        return False

    def accept_run(chars):
        while accept(chars):
            pass

    accept(SIGN)
    if accept('0') and accept('xX'):
        accept_run(HEX)
        return start if is_alnum(peek()) else pos
    backup = pos
    accept_run(BARE_HEX)
    if is_alnum(peek()):
        # not a hex number, start again as decimal
        pos = backup
    accept_run(DECIMAL)
    if accept('.'):
        accept_run(DECIMAL)
    if accept('eE'):
        accept(SIGN)
        accept_run(DECIMAL)
    accept('i')
    return start if is_alnum(peek()) else pos


def parse_string(text, pos=0):
    """scan a string value: everything up to the next space

    :return: the end position of the string
    """
    end = text.find(' ', pos)
    return len(text) if end < 0 else end


def format_text(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_float(value)
    return str(value)


WIDTH = re.compile(r'%(0?)(\d*)')
# verbs taking integers only
INTEGER_VERBS = 'dxXc'


def format_placeholder(fmt, value, datatype=None):
    """apply a printf-style placeholder to a value

    the verbs b (binary) and t (boolean) are handled here, the others by
    the % operator. Values not fitting the verb are rendered as
    %!<verb>(<kind>=<value>). With a datatype, %s and the kind name
    follow the datatype, e.g. a float32 prints as 3.46.
    """
    verb = fmt[-1]
    text = format_text(value) if datatype is None else datatype.format_value(value)
    if verb == 's':
        return text
    try:
        if verb in 'bt':
            zero, width = WIDTH.match(fmt).groups()
            if verb == 't':
                if not isinstance(value, bool):
                    raise TypeError('not a bool')
                return format_text(value).rjust(int(width or 0))
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError('not an int')
            return format(value, f'{zero}{width}b')
        if verb in INTEGER_VERBS and isinstance(value, (bool, float)):
            raise TypeError('not an int')
        return fmt % value
    except (TypeError, ValueError, OverflowError):
        kind = type(value).__name__ if datatype is None else datatype.name
        return f'%!{verb}({kind}={text})'


class CommandPattern:
    """the compiled templates of a command

    :param name: the command name
    :param request: the request template (mandatory)
    :param response: the response template (may be empty)
    """

    def __init__(self, name, request, response=''):
        self.name = name
        if not request:
            raise RequestSyntaxError(f'command {name}: missing request')
        self.request = self.compile(request, RequestSyntaxError)
        self.response = self.compile(response or '', ResponseSyntaxError)

    def compile(self, template, errorclass):
        tokens = lex_template(template)
        if tokens and tokens[-1].type == TokenType.ERROR:
            raise errorclass(f'command {self.name}: illegal syntax in {template!r}, {tokens[-1].value}')
        return tokens

    @property
    def request_params(self):
        return [t.value for t in self.request if t.type == TokenType.PARAM]

    @property
    def response_params(self):
        return [t.value for t in self.response if t.type == TokenType.PARAM]

    @property
    def params(self):
        """the referenced parameter names, without duplicates"""
        return list(dict.fromkeys(self.request_params + self.response_params))

    def match(self, frame):
        """match a frame (str) against the request

        :return: dict of captured strings by parameter name, or None when not matching
        """
        pos = 0
        pending = None
        captured = {}
        for token in self.request:
            if token.type in VERBATIM:
                if not frame.startswith(token.value, pos):
                    return None
                pos += len(token.value)
            elif token.type in PLACEHOLDERS:
                scan = parse_string if token.type == TokenType.STRING else parse_number
                end = scan(frame, pos)
                if end == pos:
                    return None
                pending = frame[pos:end]
                pos = end
            elif token.type == TokenType.PARAM:
                if pending is not None:
                    captured[token.value] = pending
                    pending = None
        if pos != len(frame):
            return None
        return captured

    def render(self, payload, datatypes=None):
        """the response with the values from payload filled in (str, no terminator)

        datatypes is an optional dict parameter name -> DataType used for formatting
        """
        datatypes = datatypes or {}
        result = []
        fmt = '%s'
        for token in self.response:
            if token.type in VERBATIM:
                result.append(token.value)
            elif token.type in PLACEHOLDERS:
                fmt = token.value
            elif token.type == TokenType.PARAM:
                result.append(format_placeholder(fmt, payload[token.value], datatypes.get(token.value)))
        return ''.join(result)

    def __repr__(self):
        return f'CommandPattern({self.name!r})'


class StreamProtocol:
    """the protocol engine of a device

    :param commands: an iterable of objects with attributes name, request, response
    :param interm: the input terminator (bytes)
    :param outterm: the output terminator (bytes)
    :param mismatch: the reply on unknown input (bytes, may be empty)
    :param datatypes: dict parameter name -> DataType, for rendering values in their kind
    """

    def __init__(self, commands, interm=b'', outterm=b'', mismatch=b'', datatypes=None):
        self.patterns = {}
        for cmd in commands:
            self.patterns[cmd.name] = CommandPattern(cmd.name, cmd.request, cmd.response)
        # longest request first, ties in declaration order
        self.match_order = sorted(self.patterns.values(), key=lambda p: -len(p.request))
        self.interm = interm
        self.outterm = outterm
        self.mismatch = mismatch
        self.datatypes = datatypes or {}

    def split_frames(self, data):
        """split data into frames on the input terminator

        a non terminated tail is the last frame. Without a terminator,
        no frames are found at all.
        """
        if not self.interm:
            return []
        frames = data.split(self.interm)
        if not frames[-1]:
            frames.pop()
        return frames

    def decode_frame(self, frame):
        text = frame.decode(ENCODING, errors='replace')
        for pattern in self.match_order:
            captured = pattern.match(text)
            if captured is None:
                continue
            payload = dict(captured)
            for name in pattern.response_params:
                payload.setdefault(name, None)
            return Transaction(TransactionType.SET if captured else TransactionType.GET,
                               pattern.name, payload)
        if self.mismatch:
            return Transaction(TransactionType.MISMATCH)
        return Transaction(TransactionType.UNKNOWN)

    def decode(self, data):
        """the transactions for all frames in data"""
        return [self.decode_frame(frame) for frame in self.split_frames(data)]

    def render(self, name, payload):
        """the response of a command, with terminator, or b'' when empty"""
        pattern = self.patterns.get(name)
        if pattern is None:
            return b''
        reply = pattern.render(payload, self.datatypes)
        if not reply:
            return b''
        return reply.encode(ENCODING) + self.outterm

    def encode_one(self, transaction):
        if transaction.type == TransactionType.MISMATCH:
            return self.mismatch + self.outterm if self.mismatch else b''
        if transaction.type == TransactionType.UNKNOWN:
            return b''
        return self.render(transaction.command, transaction.payload)

    def encode(self, transactions):
        return b''.join(self.encode_one(t) for t in transactions)
