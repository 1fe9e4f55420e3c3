#!/usr/bin/env python3
"""
Command-line entry point

    isoftp serve IMAGE [--port 2121] [--user NAME --password PW]
    isoftp mount IMAGE MOUNTPOINT
    isoftp ls IMAGE [PATH] [-R]
    isoftp cat IMAGE PATH
"""

import argparse
import logging
import posixpath
import stat
import sys
import time

from . import __version__
from .config import (DEFAULT_BANNER, DEFAULT_PORT, ServerConfig, StorageConfig,
                     parse_extensions, parse_port_range)
from .session import open_session

logger = logging.getLogger("isoftp")


def _log_level(args):
    if args.debug:
        return logging.DEBUG
    if args.verbose:
        return logging.INFO
    return logging.WARNING


def _storage_config(args):
    return StorageConfig(args.image, extensions=parse_extensions(args.prefer))


def cmd_serve(args):
    from pyftpdlib.log import config_logging

    from .ftp import serve

    # pyftpdlib reports connections and transfers at INFO
    config_logging(level=logging.DEBUG if args.debug else logging.INFO,
                   other_loggers=[logger])
    server = ServerConfig(
        host=args.host,
        port=args.port,
        user=args.user,
        password=args.password or "",
        anonymous=args.anonymous or args.user is None,
        passive_ports=parse_port_range(args.passive_ports) if args.passive_ports else None,
        banner=args.banner,
        max_connections=args.max_connections,
    )
    serve(_storage_config(args), server)
    return 0


def cmd_mount(args):
    from .fusefs import mount

    mount(args.image, args.mountpoint, foreground=not args.background,
          extensions=parse_extensions(args.prefer))
    return 0


def _format_row(name, meta):
    stamp = time.strftime("%Y-%m-%d %H:%M", time.gmtime(meta.mtime))
    return "%s %8d %s %s" % (stat.filemode(meta.mode), meta.size, stamp, name)


def cmd_ls(args, out=None):
    out = out or sys.stdout
    with open_session(_storage_config(args)) as session:
        pending = [args.path]
        while pending:
            path = pending.pop(0)
            meta = session.stat(path)
            if not meta.is_dir:
                print(_format_row(path, meta), file=out)
                continue
            listing = session.list(path)
            if args.recursive:
                print("%s:" % session.resolve(path).path, file=out)
            for name, child in listing:
                print(_format_row(name, child), file=out)
                if args.recursive and child.is_dir:
                    pending.append(posixpath.join(path, name))
            if args.recursive and pending:
                print(file=out)
    return 0


def cmd_cat(args, out=None):
    out = out or sys.stdout.buffer
    with open_session(_storage_config(args)) as session:
        with session.retrieve(args.path, offset=args.offset) as stream:
            for chunk in stream.chunks():
                out.write(chunk)
    out.flush()
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="isoftp",
        description="Serve the contents of an ISO 9660 image read-only.")
    parser.add_argument("--version", action="version",
                        version="%(prog)s " + __version__)
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--prefer", default="rock_ridge,joliet",
                        help="naming extensions to prefer, richest first, "
                             "or 'plain' for ISO 9660 names only "
                             "(default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="serve an image over FTP")
    serve.add_argument("image")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=DEFAULT_PORT)
    serve.add_argument("--user")
    serve.add_argument("--password")
    serve.add_argument("--anonymous", action="store_true",
                       help="also allow anonymous logins when --user is given")
    serve.add_argument("--passive-ports", default="50000-65535")
    serve.add_argument("--banner", default=DEFAULT_BANNER)
    serve.add_argument("--max-connections", type=int, default=512)
    serve.set_defaults(func=cmd_serve)

    mount = sub.add_parser("mount", help="mount an image with FUSE")
    mount.add_argument("image")
    mount.add_argument("mountpoint")
    mount.add_argument("--background", action="store_true")
    mount.set_defaults(func=cmd_mount)

    ls = sub.add_parser("ls", help="list a directory of an image")
    ls.add_argument("image")
    ls.add_argument("path", nargs="?", default="/")
    ls.add_argument("-R", "--recursive", action="store_true")
    ls.set_defaults(func=cmd_ls)

    cat = sub.add_parser("cat", help="write one file of an image to stdout")
    cat.add_argument("image")
    cat.add_argument("path")
    cat.add_argument("--offset", type=int, default=0)
    cat.set_defaults(func=cmd_cat)
    return parser


def main(argv=None):
    """Command-line entry point"""
    args = build_parser().parse_args(argv)
    if args.command != "serve":
        logging.basicConfig(level=_log_level(args),
                            format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        return args.func(args)
    except (OSError, ValueError) as err:
        print("isoftp: %s" % err, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == '__main__':
    sys.exit(main())
