"""
FTP front end
Plugs image sessions into pyftpdlib: every logged-in connection gets its
own IsoFilesystem, which opens its own session onto the image.
"""

import logging
import os

from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.filesystems import AbstractedFS
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import FTPServer

from .session import open_session

logger = logging.getLogger(__name__)

READ_ONLY_PERMS = "elr"
VIRTUAL_HOME = "/"


class IsoFilesystem(AbstractedFS):
    """AbstractedFS over one image session.

    Paths handed around by pyftpdlib are the image's own absolute paths:
    there is no real directory behind them.
    """

    storage_config = None

    def __init__(self, root, cmd_channel):
        super().__init__(root, cmd_channel)
        self.session = open_session(self.storage_config)

    # Path mapping

    def ftp2fs(self, ftppath):
        return self.ftpnorm(ftppath)

    def fs2ftp(self, fspath):
        return self.ftpnorm(fspath)

    def validpath(self, path):
        return True

    def realpath(self, path):
        return path

    # Read operations

    def chdir(self, path):
        self.cwd = self.session.chdir_check(path)

    def listdir(self, path):
        return [name for name, meta in self.session.list(path)]

    def stat(self, path):
        return self.session.stat(path).as_stat_result()

    lstat = stat

    def readlink(self, path):
        return self.session.readlink(path)

    def isfile(self, path):
        return self._kind_is(path, "is_file")

    def isdir(self, path):
        return self._kind_is(path, "is_dir")

    def islink(self, path):
        return self._kind_is(path, "is_symlink")

    def lexists(self, path):
        try:
            self.session.stat(path)
        except OSError:
            return False
        return True

    def getsize(self, path):
        return self.session.stat(path).size

    def getmtime(self, path):
        return self.session.stat(path).mtime

    def open(self, filename, mode):
        if set(mode) & set("wax+"):
            self.session.store(filename)
        return self.session.retrieve(filename)

    def get_user_by_uid(self, uid):
        return str(uid)

    def get_group_by_gid(self, gid):
        return str(gid)

    # Write operations

    def mkstemp(self, suffix="", prefix="", dir=None, mode="wb"):
        self.session.store(dir or self.cwd)

    def mkdir(self, path):
        self.session.mkdir(path)

    def rmdir(self, path):
        self.session.rmdir(path)

    def remove(self, path):
        self.session.delete(path)

    def rename(self, src, dst):
        self.session.rename(src, dst)

    def chmod(self, path, mode):
        self.session.set_permissions(path, mode)

    def utime(self, path, timeval):
        self.session.set_mtime(path, timeval)

    def close(self):
        self.session.close()

    def _kind_is(self, path, attr):
        try:
            meta = self.session.stat(path)
        except OSError:
            return False
        return getattr(meta, attr)


class IsoFTPHandler(FTPHandler):
    """FTPHandler that serves an image and closes its session on disconnect"""

    # Streams are not OS files, so sendfile() cannot be used on them
    use_sendfile = False

    def handle_auth_success(self, home, password, msg_login):
        # Every login builds a new filesystem; after REIN the old one is
        # still open
        fs = self.fs
        self.fs = None
        if isinstance(fs, IsoFilesystem):
            fs.close()
        super().handle_auth_success(home, password, msg_login)

    def close(self):
        fs = self.fs
        try:
            super().close()
        finally:
            if isinstance(fs, IsoFilesystem):
                fs.close()


def make_authorizer(server_config):
    authorizer = DummyAuthorizer()
    if server_config.user is not None:
        authorizer.add_user(server_config.user, server_config.password,
                            VIRTUAL_HOME, perm=READ_ONLY_PERMS)
    if server_config.anonymous:
        authorizer.add_anonymous(VIRTUAL_HOME, perm=READ_ONLY_PERMS)
    return authorizer


def make_handler(storage_config, server_config):
    """Build a handler class bound to one image.

    pyftpdlib instantiates `abstracted_fs` once per login, which gives each
    connection a fresh session onto the image.
    """
    filesystem = type("BoundIsoFilesystem", (IsoFilesystem,),
                      {"storage_config": storage_config})
    attrs = {
        "abstracted_fs": filesystem,
        "authorizer": make_authorizer(server_config),
        "banner": server_config.banner,
    }
    if server_config.passive_ports is not None:
        attrs["passive_ports"] = list(server_config.passive_ports)
    return type("BoundIsoFTPHandler", (IsoFTPHandler,), attrs)


def make_server(storage_config, server_config):
    handler = make_handler(storage_config, server_config)
    server = FTPServer((server_config.host, server_config.port), handler)
    server.max_cons = server_config.max_connections
    server.max_cons_per_ip = server_config.max_connections_per_ip
    return server


def serve(storage_config, server_config):
    server = make_server(storage_config, server_config)
    logger.info("Serving %s on ftp://%s:%d/", _describe(storage_config.source),
                server_config.host, server_config.port)
    try:
        server.serve_forever()
    finally:
        server.close_all()


def _describe(source):
    if isinstance(source, (str, os.PathLike)):
        return os.path.basename(os.fspath(source))
    return repr(source)
