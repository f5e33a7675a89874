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
"""Define the errors of the virtual device

all error classes inherited from VDError should be placed in this module.
The kind names (VDError.name) are the stable error taxonomy of the
device, shared by the stream engine, the facade and the control plane
"""


class VDError(RuntimeError):
    """base class of all virtual device errors

    ``name`` is the stable error kind, ``str(err)`` the human readable detail
    """
    name = 'internal-error'

    def __init__(self, *args, **kwds):
        super().__init__(*args)
        self.kwds = kwds
        for k, v in kwds.items():
            setattr(self, k, v)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(repr(a) for a in self.args)})"

    def __eq__(self, other):
        return type(self) is type(other) and self.args == other.args and self.kwds == other.kwds

    def __ne__(self, other):
        return not self == other

    __hash__ = RuntimeError.__hash__


class InternalError(VDError):
    """uncatched error"""
    name = 'internal-error'


class ProgrammingError(VDError):
    """an error caused by a bug in the simulator"""
    name = 'internal-error'


class ConfigError(VDError):
    """invalid configuration"""
    name = 'config-error'


class NoSuchParameterError(VDError):
    """the named parameter is not declared"""
    name = 'param-not-found'


class NoSuchCommandError(VDError):
    """the named command is not declared"""
    name = 'command-not-found'


class TemplateSyntaxError(ConfigError):
    """do not raise, but might be used for instance checks"""


class RequestSyntaxError(TemplateSyntaxError):
    """illegal syntax in a request template"""
    name = 'wrong-syntax-in-request'


class ResponseSyntaxError(TemplateSyntaxError):
    """illegal syntax in a response template"""
    name = 'wrong-syntax-in-response'


class BadValueError(VDError):
    """do not raise, but might be used for instance checks"""


class WrongTypeError(BadValueError, TypeError):
    """the value has a type which can not be converted to the parameter kind"""
    name = 'value-wrong-type'


class UnparsableValueError(BadValueError, ValueError):
    """a string value could not be parsed into the parameter kind"""
    name = 'value-unparsable'


class NotAllowedError(BadValueError, ValueError):
    """the value is not a member of the allowed set of the parameter"""
    name = 'value-not-in-allowed-set'


class InvalidDurationError(VDError, ValueError):
    """a delay text is not a valid duration"""
    name = 'invalid-duration'


class MismatchTooLongError(VDError, ValueError):
    """the mismatch message exceeds its length limit"""
    name = 'mismatch-too-long'


class NoClientError(VDError):
    """a trigger found no stream client to deliver to"""
    name = 'no-client-available'


class CommunicationFailedError(VDError):
    """transport fault on one of the endpoints"""
    name = 'io-error'


class APIError(VDError):
    """the control plane replied with an error

    the detail is the text sent by the server, the status code is in attribute ``status``
    """
    name = 'api-error'


def vd_error(exc):
    """turn into InternalError, if not already a VDError"""
    if isinstance(exc, VDError):
        return exc
    return InternalError(f'{type(exc).__name__}: {exc}')

