"""Serving certificate that follows its files on disk.

``DynamicServingCertificate`` reads the certificate and key once at startup
(``run_once``), then a watchdog observer and a periodic resync reload them
whenever they change. The server's ``ssl.SSLContext`` picks the current pair at
every TLS handshake, so renewed certificates are served without a restart.
"""

import logging
import os
import ssl
import threading
from typing import Protocol, runtime_checkable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from logging_view_plugin.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

RESYNC_INTERVAL_SECONDS = 60.0
LOAD_ATTEMPTS = 3


class CertificateError(Exception):
    """The certificate or key files cannot be used to serve TLS."""


@runtime_checkable
class CertificateSource(Protocol):
    def current_pair(self) -> tuple[bytes, bytes]: ...


def new_server_context() -> ssl.SSLContext:
    # clients must use TLS 1.2 or higher
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, certificate: "DynamicServingCertificate"):
        self.certificate = certificate

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory and event.event_type == "modified":
            return
        self.certificate.reload()


class DynamicServingCertificate:
    def __init__(
        self,
        name: str,
        cert_file: str,
        key_file: str,
        log: logging.Logger | None = None,
        resync_interval: float = RESYNC_INTERVAL_SECONDS,
    ):
        self.name = name
        self.cert_file = cert_file
        self.key_file = key_file
        self.log = log or logger
        self.resync_interval = resync_interval

        self._lock = threading.Lock()
        self._pair: tuple[bytes, bytes] | None = None
        self._context: ssl.SSLContext | None = None
        self._stop = threading.Event()
        self._observer = None
        self._thread: threading.Thread | None = None

    def _read(self) -> tuple[bytes, bytes]:
        try:
            with open(self.cert_file, "rb") as f:
                cert = f.read()
            with open(self.key_file, "rb") as f:
                key = f.read()
        except OSError as e:
            raise CertificateError(f"{self.name}: cannot read certificate/key files: {e}") from e
        if not cert or not key:
            raise CertificateError(f"{self.name}: empty certificate or key file")
        return cert, key

    def _load_context(self) -> ssl.SSLContext:
        context = new_server_context()
        try:
            context.load_cert_chain(self.cert_file, self.key_file)
        except (OSError, ssl.SSLError) as e:
            raise CertificateError(f"{self.name}: invalid certificate/key pair: {e}") from e
        return context

    def run_once(self) -> bool:
        """Load the files, swapping them in if they changed.

        Returns True when a new pair became active. Raises CertificateError and
        keeps the previous pair when the files are not usable.
        """
        for _ in range(LOAD_ATTEMPTS):
            pair = self._read()
            with self._lock:
                if pair == self._pair:
                    return False
            context = self._load_context()
            # the files may be rotated between reading the bytes and loading the context
            if self._read() == pair:
                break
        else:
            raise CertificateError(f"{self.name}: certificate files kept changing while loading")
        with self._lock:
            self._pair = pair
            self._context = context
        self.log.info("loaded serving certificate %s from %s", self.name, self.cert_file)
        return True

    def reload(self) -> None:
        try:
            self.run_once()
        except CertificateError as e:
            self.log.error("failed to reload serving certificate: %s", e)

    def current_pair(self) -> tuple[bytes, bytes]:
        with self._lock:
            if self._pair is None:
                raise CertificateError(f"{self.name}: no certificate loaded")
            return self._pair

    def current_context(self) -> ssl.SSLContext:
        with self._lock:
            if self._context is None:
                raise CertificateError(f"{self.name}: no certificate loaded")
            return self._context

    def server_context(self) -> ssl.SSLContext:
        """SSL context for the listener; it switches to the current pair per handshake."""
        context = self._load_context()

        def _select(ssl_object, server_name, base_context):
            ssl_object.context = self.current_context()

        context.sni_callback = _select
        return context

    def _resync(self) -> None:
        while not self._stop.wait(self.resync_interval):
            self.reload()

    def start(self) -> None:
        """Watch the files in the background until stop() is called."""
        observer = Observer()
        handler = _ChangeHandler(self)
        directories = {os.path.dirname(os.path.abspath(p)) for p in (self.cert_file, self.key_file)}
        for directory in directories:
            observer.schedule(handler, directory, recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer

        self._thread = threading.Thread(target=self._resync, name=f"{self.name}-resync", daemon=True)
        self._thread.start()
        self.log.debug("watching %s for certificate changes", ", ".join(sorted(directories)))

    def stop(self) -> None:
        self._stop.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._thread is not None:
            self._thread.join()
            self._thread = None
