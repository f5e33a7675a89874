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
"""command line interface

vd <file>                       run the simulator (same as 'vd serve <file>')
vd get <name>                   print the value of a parameter
vd get delay <cmd>              print the delay of a command
vd get mismatch                 print the mismatch message
vd set <name> <value>           set a parameter
vd set delay <cmd> <duration>   set the delay of a command
vd set mismatch <text>          set the mismatch message
vd trigger <cmd>                send the response of a command to a stream client
vd generate                     write an example device file
"""

import argparse
import sys

from vdsim.client import APIClient
from vdsim.config import SAMPLE_FILENAME, write_sample_config
from vdsim.errors import VDError
from vdsim.lib import generalConfig
from vdsim.logging import logger
from vdsim.version import get_version

SUBCOMMANDS = ('serve', 'get', 'set', 'trigger', 'generate')


class UsageError(Exception):
    pass


def add_api_argument(parser):
    parser.add_argument('-a', '--apiAddr', dest='api_addr',
                        help='address of the HTTP API of the simulator '
                        f'(env. VD_API_ADDR, default {generalConfig.defaults["api_addr"]})')


def make_parser():
    parser = argparse.ArgumentParser(
        prog='vd', description='vd is an easy to use device simulator',
        formatter_class=argparse.RawDescriptionHelpFormatter, epilog=__doc__)
    parser.add_argument('--version', action='version', version=f'%(prog)s {get_version()}')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='run the simulator with the given device file')
    serve.add_argument('vdfile', help='the device file (TOML)')
    serve.add_argument('--listenAddr', dest='listen_addr',
                       help='address of the stream interface '
                       f'(env. VD_LISTEN_ADDR, default {generalConfig.defaults["listen_addr"]})')
    serve.add_argument('--httpListenAddr', dest='http_listen_addr',
                       help='address of the HTTP API '
                       f'(env. VD_HTTP_LISTEN_ADDR, default {generalConfig.defaults["http_listen_addr"]})')
    loggroup = serve.add_mutually_exclusive_group()
    loggroup.add_argument('-v', '--verbose', help='output lots of diagnostic information',
                          action='store_true', default=False)
    loggroup.add_argument('-q', '--quiet', help='suppress non-error messages',
                          action='store_true', default=False)
    serve.add_argument('-d', '--daemonize', help='run as daemon',
                       action='store_true', default=False)

    get = sub.add_parser('get', help='get a parameter, "delay <cmd>" or "mismatch"')
    get.add_argument('args', nargs='+', metavar='name')
    add_api_argument(get)

    setp = sub.add_parser('set', help='set a parameter, "delay <cmd> <duration>" or "mismatch <text>"')
    setp.add_argument('args', nargs='+', metavar='name')
    add_api_argument(setp)

    trigger = sub.add_parser('trigger', help='send the response of a command to a stream client')
    trigger.add_argument('cmd')
    add_api_argument(trigger)

    generate = sub.add_parser('generate', help=f'write an example device file ({SAMPLE_FILENAME})')
    generate.add_argument('-o', '--output', help=f'the file to write, default {SAMPLE_FILENAME}')
    generate.add_argument('--force', action='store_true', help='overwrite an existing file')
    generate.add_argument('--random-delays', action='store_true',
                          help='give every command a random delay of 0..9 sec')
    return parser


def do_get(client, args):
    if args == ['mismatch']:
        return client.get_mismatch()
    if len(args) == 2 and args[0] == 'delay':
        return client.get_command_delay(args[1])
    if len(args) == 1 and args[0] != 'delay':
        return client.get_parameter(args[0])
    raise UsageError('usage: vd get <name> | vd get delay <cmd> | vd get mismatch')


def do_set(client, args):
    if len(args) == 2 and args[0] == 'mismatch':
        client.set_mismatch(args[1])
    elif len(args) == 3 and args[0] == 'delay':
        client.set_command_delay(args[1], args[2])
    elif len(args) == 2 and args[0] not in ('delay', 'mismatch'):
        client.set_parameter(args[0], args[1])
    else:
        raise UsageError('usage: vd set <name> <value> | vd set delay <cmd> <duration> '
                         '| vd set mismatch <text>')
    return 'OK'


def do_trigger(client, cmd):
    client.trigger(cmd)
    return 'OK'


def serve(args):
    # pylint: disable=import-outside-toplevel
    from vdsim.server import Server

    loglevel = 'debug' if args.verbose else ('error' if args.quiet else 'info')
    logger.init(loglevel)
    srv = Server(args.vdfile, logger.log, listen_addr=args.listen_addr,
                 http_listen_addr=args.http_listen_addr)
    if args.daemonize:
        srv.start()
    else:
        srv.run()


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if argv and argv[0] not in SUBCOMMANDS and argv[0] not in ('-h', '--help', '--version'):
        argv = ['serve'] + list(argv)
    args = make_parser().parse_args(argv)
    try:
        generalConfig.init()
        if args.command == 'serve':
            serve(args)
            return 0
        if args.command == 'generate':
            path = write_sample_config(args.output, args.force, args.random_delays)
            print(f'Writing vdfile config file {path}')
            return 0
        client = APIClient(args.api_addr or generalConfig.api_addr)
        if args.command == 'get':
            result = do_get(client, args.args)
        elif args.command == 'set':
            result = do_set(client, args.args)
        else:
            result = do_trigger(client, args.cmd)
        print(result)
        return 0
    except (VDError, UsageError, ValueError, OSError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
