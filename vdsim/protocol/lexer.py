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
"""lexer for request and response templates

A template is a text like ``CUR {%d:current} A`` or ``PSI %3.2f:psi OK``.
It is split into tokens:

- literal text (``CUR``, ``A``, ``OK``)
- runs of spaces, kept verbatim
- placeholders: ``%s`` for strings, ``%<width>.<prec><verb>`` for numbers
- the name of the parameter bound to the preceding placeholder, either
  after a colon (``%d:current``) or inside braces (``{%d:current}``)
- the braces themselves
- escapes: control characters, or one of the sequences \\n, \\r, \\t

The lexer is a state machine, every state is a method returning the next
state. It never backtracks more than one character. Syntax errors are
reported as a token of type ERROR, after which lexing stops.
"""

import re
from enum import Enum
from typing import NamedTuple


class TokenType(Enum):
    LITERAL = 'literal'
    WHITESPACE = 'whitespace'
    NUMBER = 'number placeholder'
    STRING = 'string placeholder'
    PARAM = 'param'
    LEFT_BRACE = 'left brace'
    RIGHT_BRACE = 'right brace'
    ESCAPE = 'escape'
    ERROR = 'error'


class Token(NamedTuple):
    type: TokenType
    value: str

    def __repr__(self):
        return f'{self.type.name}({self.value!r})'


EOF = ''
SPACE = ' '
PARAM_CHARS = frozenset('_.-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ')
NUMBER_FORMAT_CHARS = frozenset('.0123456789gGeEfFdcbtxX')
NUMBER_FORMAT = re.compile(r'%\d*(\.\d*)?[gGeEfFdcbtxX]$')
ESCAPES = {'n': '\n', 'r': '\r', 't': '\t'}


def is_control(ch):
    return ch != EOF and (ord(ch) < 32 or ord(ch) == 127)


class Lexer:
    """splits one template into tokens"""

    def __init__(self, text):
        self.text = text
        self.start = 0
        self.pos = 0
        self.tokens = []
        self.braced = False

    def run(self):
        state = self.lex_start
        while state:
            state = state()
        return self.tokens

    # helpers

    def peek(self, offset=0):
        pos = self.pos + offset
        return self.text[pos] if pos < len(self.text) else EOF

    def next(self):
        ch = self.peek()
        if ch:
            self.pos += 1
        return ch

    def accept(self, valid):
        if self.peek() and self.peek() in valid:
            self.pos += 1
            return True
        return False

    def accept_run(self, valid):
        start = self.pos
        while self.accept(valid):
            pass
        return self.pos > start

    def ignore(self):
        self.start = self.pos

    def emit(self, typ, value=None):
        self.tokens.append(Token(typ, self.text[self.start:self.pos] if value is None else value))
        self.start = self.pos

    def error(self, msg):
        context = self.text[max(0, self.pos - 10):self.pos + 1]
        self.tokens.append(Token(TokenType.ERROR, f'error at char {self.pos}: {context!r}: {msg}'))

    def at_escape(self):
        ch = self.peek()
        return is_control(ch) or (ch == '\\' and self.peek(1) in ESCAPES)

    # states

    def lex_start(self):
        ch = self.peek()
        if ch == EOF:
            return None
        if ch == SPACE:
            self.accept_run(SPACE)
            self.emit(TokenType.WHITESPACE)
            return self.lex_start
        if self.at_escape():
            return self.lex_escape
        if ch == '{':
            self.next()
            self.emit(TokenType.LEFT_BRACE)
            self.braced = True
            return self.lex_inside_param
        if ch == '}':
            self.next()
            return self.error('unbalanced }')
        if ch == '%':
            self.braced = False
            return self.lex_placeholder
        return self.lex_command

    def lex_command(self):
        while True:
            ch = self.peek()
            if ch in (EOF, SPACE, '%', '{', '}') or self.at_escape():
                self.emit(TokenType.LITERAL)
                return self.lex_start
            self.next()

    def lex_escape(self):
        ch = self.next()
        if ch == '\\':
            ch = ESCAPES[self.next()]
        self.emit(TokenType.ESCAPE, ch)
        return self.lex_start

    def lex_placeholder(self):
        self.next()  # the %
        if self.accept('s'):
            self.emit(TokenType.STRING)
        else:
            self.accept_run(NUMBER_FORMAT_CHARS)
            if not NUMBER_FORMAT.match(self.text[self.start:self.pos]):
                return self.error('wrong placeholder value')
            self.emit(TokenType.NUMBER)
        if self.braced:
            return self.lex_inside_param
        if not self.accept(':'):
            return self.error('placeholder must be followed by :<parameter name>')
        self.ignore()
        return self.lex_param

    def lex_inside_param(self):
        """between the braces: one placeholder, then one parameter name"""
        while True:
            ch = self.peek()
            if ch in (SPACE, ':'):
                self.next()
                self.ignore()
                continue
            last = self.tokens[-1].type
            if ch == '%' and last == TokenType.LEFT_BRACE:
                return self.lex_placeholder
            if ch in PARAM_CHARS and last in (TokenType.NUMBER, TokenType.STRING):
                return self.lex_param
            if ch == '}' and last == TokenType.PARAM:
                return self.lex_right_brace
            if ch == EOF:
                return self.error('missing }')
            return self.error('braces must contain {%<format>:<parameter name>}')

    def lex_param(self):
        if not self.accept_run(PARAM_CHARS):
            return self.error('missing parameter name')
        self.emit(TokenType.PARAM)
        if self.braced:
            return self.lex_inside_param
        return self.lex_start

    def lex_right_brace(self):
        self.next()
        self.emit(TokenType.RIGHT_BRACE)
        self.braced = False
        return self.lex_start


def lex_template(text):
    """the list of tokens of a template

    the last token is of type ERROR when the template is not valid
    """
    return Lexer(text).run()
