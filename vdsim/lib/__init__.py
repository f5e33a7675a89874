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
#   Alexander Zaft <a.zaft@fz-juelich.de>
#
# *****************************************************************************
"""Define helpers"""

import re
import socket
import sys
import threading
import traceback
from configparser import ConfigParser
from os import environ, path


DEFAULT_LISTEN_ADDR = '127.0.0.1:9999'
DEFAULT_HTTP_LISTEN_ADDR = '127.0.0.1:8080'


class GeneralConfig:
    """generalConfig holds server configuration items

    generalConfig.init is to be called before starting the server.
    Accessing generalConfig.<key> raises an error, when generalConfig.init is
    not yet called, except when a default for <key> is set.
    For tests and for imports from client code, a module may access generalConfig
    without calling generalConfig.init before. For this, it should call
    generalConfig.set_default on import to define defaults for the needed keys.
    """

    # environment variables overriding the config file, by key
    ENV_KEYS = {
        'listen_addr': 'VD_LISTEN_ADDR',
        'http_listen_addr': 'VD_HTTP_LISTEN_ADDR',
        'api_addr': 'VD_API_ADDR',
        'logdir': 'VD_LOGDIR',
        'piddir': 'VD_PIDDIR',
    }

    def __init__(self):
        self._config = None
        self.defaults = {}  #: default values. may be set before or after :meth:`init`

    def init(self, configfile=None):
        """init default server configuration

        :param configfile: if present, keys and values from the [VD] section are read

        if configfile is not given, the env. variable VD_CONFIG_FILE is used

        if a configfile is given, the values from the VD section are
        overriding the defaults

        finally, the env. variables VD_LISTEN_ADDR, VD_HTTP_LISTEN_ADDR,
        VD_API_ADDR, VD_LOGDIR and VD_PIDDIR are overriding these values when given
        """
        cfg = {}
        if path.splitext(sys.executable)[1] == '.exe':
            # special MS windows environment
            self.update_defaults(piddir='./', logdir='./log')
        else:
            self.update_defaults(piddir='/tmp/vd', logdir=None)
        if configfile is None:
            configfile = environ.get('VD_CONFIG_FILE')
            if configfile:
                configfile = path.expanduser(configfile)
                if not path.exists(configfile):
                    raise FileNotFoundError(configfile)
        if configfile:
            parser = ConfigParser()
            parser.optionxform = str
            parser.read([configfile])
            # only the VD section is relevant, other sections might be used by others
            for key, value in parser['VD'].items():
                cfg[key] = path.expanduser(value)
        for key, envname in self.ENV_KEYS.items():
            if (env := environ.get(envname)) is not None:
                cfg[key] = env
        self._config = cfg

    def __getitem__(self, key):
        """access for keys known to exist

        :param key: the key (raises an error when key is not available)
        :return: the value
        """
        try:
            return self._config[key]
        except KeyError:
            return self.defaults[key]
        except TypeError:
            if key in self.defaults:
                # accept retrieving defaults before init
                return self.defaults[key]
            raise TypeError('generalConfig.init() has to be called first') from None

    def get(self, key, default=None):
        """access for keys not known to exist"""
        try:
            return self[key]
        except KeyError:
            return default

    def getfloat(self, key, default=None):
        """access and convert to float"""
        try:
            return float(self[key])
        except KeyError:
            return default

    def __getattr__(self, key):
        """goodie: use generalConfig.<key> instead of generalConfig.get('<key>')"""
        return self.get(key)

    def update_defaults(self, **updates):
        """Set a default value, when there is not already one for each dict entry."""
        for key, value in updates.items():
            self.set_default(key, value)

    def set_default(self, key, value):
        """set a default value, in case not set already"""
        if key not in self.defaults:
            self.defaults[key] = value

    def testinit(self, **kwds):
        """for test purposes"""
        self._config = kwds


generalConfig = GeneralConfig()
generalConfig.update_defaults(
    listen_addr=DEFAULT_LISTEN_ADDR,
    http_listen_addr=DEFAULT_HTTP_LISTEN_ADDR,
    api_addr=DEFAULT_HTTP_LISTEN_ADDR,
    logger_root='vd',
    drain_timeout=5,
)


def mkthread(func, *args, **kwds):
    t = threading.Thread(
        name=f'{func.__module__}:{func.__name__}',
        target=func,
        args=args,
        kwargs=kwds)
    t.daemon = True
    t.start()
    return t


def formatException(cut=0, exc_info=None):
    """Format an exception with traceback, but leave out the first `cut`
    number of frames.
    """
    if exc_info is None:
        typ, val, tb = sys.exc_info()
    else:
        typ, val, tb = exc_info
    res = ['Traceback (most recent call last):\n']
    tbres = traceback.format_tb(tb, sys.maxsize)
    res += tbres[cut:]
    res += traceback.format_exception_only(typ, val)
    return ''.join(res)


HOSTNAMEPART = re.compile(r'^(?!-)[a-z0-9-]{1,63}(?<!-)$', re.IGNORECASE)


def validate_hostname(host):
    """checks if the rules for valid hostnames are adhered to"""
    if len(host) > 255:
        return False
    for part in host.split('.'):
        if not HOSTNAMEPART.match(part):
            return False
    return True


def validate_ipv4(addr):
    """check if v4 address is valid."""
    try:
        socket.inet_aton(addr)
    except OSError:
        return False
    return True


def parse_host_port(addr):
    """Parses '<host>:<port>' addresses as used for both endpoints.

    host may be a hostname or an IPv4 address, the port is mandatory.
    Port 0 is accepted, meaning 'any free port'.
    """
    host, sep, port = addr.rpartition(':')
    if not sep:
        raise ValueError(f'missing port in {addr!r}')
    try:
        port = int(port)
    except ValueError:
        raise ValueError(f'invalid port in {addr!r}') from None
    if (validate_ipv4(host) or validate_hostname(host)) and 0 <= port < 65536:
        return host, port
    raise ValueError(f'invalid host {host!r} or port {port}')


def format_address(addr):
    if len(addr) == 2:
        return '%s:%d' % addr
    address, port = addr[0:2]
    if address.startswith('::ffff'):
        return '%s:%d' % (address[7:], port)
    return '[%s]:%d' % (address, port)


# keep a reference to socket to avoid (interpreter) shut-down problems
def closeSocket(sock, socket=socket):  # pylint: disable=redefined-outer-name
    """Do our best to close a socket."""
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except socket.error:
        pass
    try:
        sock.close()
    except socket.error:
        pass
