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
"""the virtual device

The device glues the protocol engine to the parameters. It is used
concurrently by the stream handlers and by the control plane.
"""

import logging
import queue
import threading
import time

from vdsim.errors import BadValueError, ConfigError, MismatchTooLongError, \
    NoClientError, NoSuchCommandError, NoSuchParameterError
from vdsim.lib.duration import format_duration, parse_duration
from vdsim.logging import RX, TX, comlog
from vdsim.protocol.engine import StreamProtocol
from vdsim.protocol.messages import TransactionType

MISMATCH_LIMIT = 255


def check_mismatch(text):
    """convert the mismatch message to bytes and check its length"""
    data = text.encode('utf-8')
    if len(data) > MISMATCH_LIMIT:
        raise MismatchTooLongError(
            f'new mismatch message exceeded {MISMATCH_LIMIT} characters limit')
    return data


class Command:
    """a command of the device

    :param name: the command name
    :param request: the request template
    :param response: the response template, may be empty
    :param delay: the response delay in seconds
    """

    def __init__(self, name, request, response='', delay=0.0):
        self.name = name
        self.request = request
        self.response = response
        self.delay = delay

    def __repr__(self):
        return (f'Command({self.name!r}, {self.request!r}, {self.response!r}, '
                f'{format_duration(self.delay)!r})')


class Device:
    """the virtual device

    :param vdfile: the VDFile with parameters, commands, terminators and mismatch
    :param log: the logger
    """

    def __init__(self, vdfile, log=None):
        self.log = log or logging.getLogger('vd.device')
        self.parameters = dict(vdfile.parameters)
        self.commands = dict(vdfile.commands)
        self.protocol = StreamProtocol(
            self.commands.values(), vdfile.interm, vdfile.outterm, vdfile.mismatch,
            {name: param.datatype for name, param in self.parameters.items()})
        for name, pattern in self.protocol.patterns.items():
            for pname in pattern.params:
                if pname not in self.parameters:
                    raise ConfigError(f'command {name} refers to an unknown parameter {pname!r}')
        # guards the parameter and command tables, the delays and the mismatch message
        # and makes a whole batch of transactions atomic
        self._lock = threading.RLock()
        # single slot channel for triggered responses
        self._triggered = queue.Queue(1)
        self._clients = 0

    # stream side

    def handle(self, data):
        """handle the bytes received from a client and return the reply

        the reply is delayed by the delay of the command of the first frame
        """
        delay = 0
        frames = self.protocol.split_frames(data)
        with self._lock:
            transactions = []
            for frame in frames:
                comlog(self.log, RX, frame)
                transaction = self.protocol.decode_frame(frame)
                self.apply(transaction)
                transactions.append(transaction)
            reply = self.protocol.encode(transactions)
            if reply and transactions and transactions[0].command:
                delay = self.commands[transactions[0].command].delay
        if delay:
            self.log.debug('delay %s', format_duration(delay))
            time.sleep(delay)
        if reply:
            comlog(self.log, TX, reply)
        return reply

    def apply(self, transaction):
        """apply a decoded transaction to the parameters

        captured values of a SET are checked all before any of them is stored.
        When one fails, the transaction turns into a mismatch. Afterwards the
        payload holds the current value of every referenced parameter.
        """
        if transaction.type == TransactionType.SET:
            try:
                values = {name: self.parameters[name].check(value)
                          for name, value in transaction.payload.items() if value is not None}
            except BadValueError as e:
                self.log.error('%s: %s', transaction.command, e)
                transaction.type = (TransactionType.MISMATCH if self.protocol.mismatch
                                    else TransactionType.UNKNOWN)
                return
            for name, value in values.items():
                self.parameters[name].set(value)
                self.log.info('%s = %s', name, self.parameters[name].format_value())
        if transaction.type in (TransactionType.GET, TransactionType.SET):
            for name in transaction.payload:
                transaction.payload[name] = self.parameters[name].value
        elif transaction.type == TransactionType.MISMATCH:
            self.log.info('mismatch')

    def attach_client(self):
        """register a stream client as consumer of triggered responses"""
        with self._lock:
            self._clients += 1

    def detach_client(self):
        with self._lock:
            self._clients -= 1
            if not self._clients:
                # nobody will pick up a pending response
                try:
                    self._triggered.get_nowait()
                except queue.Empty:
                    pass

    def get_triggered(self):
        """the next triggered response, or None"""
        try:
            return self._triggered.get_nowait()
        except queue.Empty:
            return None

    def trigger(self, name):
        """send the response of a command to a stream client"""
        with self._lock:
            cmd = self.get_command(name)
            payload = {pname: self.parameters[pname].value
                       for pname in self.protocol.patterns[cmd.name].response_params}
            reply = self.protocol.render(cmd.name, payload)
            if not reply:
                self.log.info('trigger %s: empty response', name)
                return
            if not self._clients:
                raise NoClientError('no client available')
        try:
            self._triggered.put_nowait(reply)
        except queue.Full:
            raise NoClientError('no client available') from None
        self.log.info('trigger %s', name)

    # control plane side

    def get_parameter_object(self, name):
        with self._lock:
            try:
                return self.parameters[name]
            except KeyError:
                raise NoSuchParameterError(f'parameter not found: {name}') from None

    def get_parameter(self, name):
        return self.get_parameter_object(name).value

    def set_parameter(self, name, value):
        param = self.get_parameter_object(name)
        with self._lock:
            param.set(value)
        self.log.info('%s = %s', name, param.format_value())

    def get_command(self, name):
        with self._lock:
            try:
                return self.commands[name]
            except KeyError:
                raise NoSuchCommandError(f'command not found: {name}') from None

    def get_command_delay(self, name):
        """the delay of a command in seconds"""
        return self.get_command(name).delay

    def set_command_delay(self, name, text):
        """set the delay of a command from a text like '1s' or '500ms'"""
        cmd = self.get_command(name)
        delay = parse_duration(text)
        with self._lock:
            cmd.delay = delay
        self.log.info('delay of %s = %s', name, format_duration(delay))

    def get_mismatch(self):
        with self._lock:
            return self.protocol.mismatch

    def set_mismatch(self, text):
        data = check_mismatch(text)
        with self._lock:
            self.protocol.mismatch = data
        self.log.info('mismatch = %r', text)

    def describe(self):
        """a table of the parameters with kind, value and the commands using them"""
        rows = [('parameter', 'kind', 'value', 'commands')]
        with self._lock:
            for name in sorted(self.parameters):
                param = self.parameters[name]
                used = [cname for cname, pattern in self.protocol.patterns.items()
                        if name in pattern.params]
                rows.append((name, param.kind, param.format_value(), ' '.join(used)))
        widths = [max(len(row[i]) for row in rows) for i in range(3)]
        return '\n'.join(' '.join(col.ljust(w) for col, w in zip(row, widths)) + ' ' + row[3]
                         for row in rows)
