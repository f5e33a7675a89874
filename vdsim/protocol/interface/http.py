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
"""HTTP interface of the device: the control plane

GET  /<param>                 value of a parameter
POST /<param>/<value>         set a parameter
GET  /mismatch                the mismatch message
POST /mismatch/<text>         set the mismatch message
GET  /delay/<cmd>             the delay of a command, e.g. '150ms'
POST /delay/<cmd>/<duration>  set the delay of a command
POST /trigger/<cmd>           send the response of a command to a stream client

errors are reported with status 500 and 'Error: <detail>' as body
"""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import unquote, urlsplit

from vdsim.errors import VDError, vd_error
from vdsim.lib import format_address, formatException, parse_host_port
from vdsim.lib.duration import format_duration
from vdsim.protocol.interface import DrainingMixIn, bind_with_retry


class APIRequestHandler(BaseHTTPRequestHandler):
    server_version = 'vd'
    # a client not sending its request is dropped after this time
    timeout = 60

    def do_GET(self):
        self.dispatch(self.GET_ROUTES)

    def do_POST(self):
        self.dispatch(self.POST_ROUTES)

    def dispatch(self, routes):
        path = urlsplit(self.path).path
        segments = [unquote(s) for s in path[1:].split('/')]
        if (segments[0], len(segments)) in routes:
            method, args = routes[segments[0], len(segments)], segments[1:]
        elif segments != [''] and (None, len(segments)) in routes:
            method, args = routes[None, len(segments)], segments
        else:
            self.reply(404, f'Error: no route for {self.command} {path}')
            return
        try:
            body = method(self, *args)
        except VDError as e:
            self.server.log.info('%s %s: %s', self.command, path, e)
            self.reply(500, f'Error: {e}')
        except Exception as e:
            self.server.log.error('%s %s:\n%s', self.command, path, formatException())
            self.reply(500, f'Error: {vd_error(e)}')
        else:
            self.reply(200, body)

    def reply(self, status, text):
        data = text.encode('utf-8') if isinstance(text, str) else text
        self.send_response(status)
        self.send_header('Content-Type', 'text/plain; charset=utf-8')
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):  # pylint: disable=redefined-builtin
        self.server.log.debug('%s %s', format_address(self.client_address), format % args)

    # routes

    def get_parameter(self, name):
        param = self.server.device.get_parameter_object(name)
        self.server.log.debug('get %s', name)
        return param.format_value()

    def set_parameter(self, name, value):
        self.server.device.set_parameter(name, value)
        return 'Parameter set successfully'

    def get_mismatch(self):
        self.server.log.debug('get mismatch')
        return self.server.device.get_mismatch()

    def set_mismatch(self, text):
        self.server.device.set_mismatch(text)
        return 'Mismatch set successfully'

    def get_delay(self, cmd):
        self.server.log.debug('get delay of %s', cmd)
        return format_duration(self.server.device.get_command_delay(cmd))

    def set_delay(self, cmd, duration):
        self.server.device.set_command_delay(cmd, duration)
        return 'Delay set successfully'

    def trigger(self, cmd):
        self.server.device.trigger(cmd)
        return 'Trigger successful'

    # (first segment, number of segments) -> method, None matches any first segment
    GET_ROUTES = {
        ('mismatch', 1): get_mismatch,
        ('delay', 2): get_delay,
        (None, 1): get_parameter,
    }
    POST_ROUTES = {
        ('mismatch', 2): set_mismatch,
        ('delay', 3): set_delay,
        ('trigger', 2): trigger,
        (None, 2): set_parameter,
    }


class HTTPServer(DrainingMixIn, ThreadingHTTPServer):
    def __init__(self, name, logger, device, address):
        """the control plane

        :param name: the name of the interface
        :param logger: the logger
        :param device: the Device
        :param address: '<host>:<port>', port 0 means any free port
        """
        self.name = name
        self.log = logger
        self.device = device
        host, port = parse_host_port(address)
        self.init_draining()
        self.log.info('HTTPServer %s binding to %s', name, address)
        bind_with_retry(self, lambda: ThreadingHTTPServer.__init__(
            self, (host, port), APIRequestHandler), self.log)
        self.log.info('HTTP API listening on http://%s', self.address)

    @property
    def address(self):
        return format_address(self.server_address[:2])
