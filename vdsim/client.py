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
"""client for the control plane of a running simulator"""

from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from vdsim.errors import APIError, CommunicationFailedError
from vdsim.lib import parse_host_port

ERROR_PREFIX = 'Error: '


class APIClient:
    """talks to the HTTP interface of a simulator

    :param address: '<host>:<port>' of the HTTP interface
    :param timeout: the timeout for one request in seconds
    """

    def __init__(self, address, timeout=10):
        parse_host_port(address)  # raises ValueError on a bad address
        self.address = address
        self.timeout = timeout

    def request(self, method, *segments):
        """send a request and return the body of the reply as str"""
        url = f"http://{self.address}/{'/'.join(quote(str(s), safe='') for s in segments)}"
        req = Request(url, data=b'' if method == 'POST' else None, method=method)
        try:
            with urlopen(req, timeout=self.timeout) as reply:
                return reply.read().decode('utf-8')
        except HTTPError as e:
            text = e.read().decode('utf-8', errors='replace')
            raise APIError(text[len(ERROR_PREFIX):] if text.startswith(ERROR_PREFIX) else text,
                           status=e.code) from None
        except (URLError, OSError) as e:
            reason = getattr(e, 'reason', e)
            raise CommunicationFailedError(f'can not connect to {self.address}: {reason}') from None

    def get_parameter(self, name):
        return self.request('GET', name)

    def set_parameter(self, name, value):
        self.request('POST', name, value)

    def get_command_delay(self, name):
        """the delay as text, e.g. '1.5s'"""
        return self.request('GET', 'delay', name)

    def set_command_delay(self, name, duration):
        self.request('POST', 'delay', name, duration)

    def get_mismatch(self):
        return self.request('GET', 'mismatch')

    def set_mismatch(self, text):
        self.request('POST', 'mismatch', text)

    def trigger(self, name):
        self.request('POST', 'trigger', name)
