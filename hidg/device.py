"""
hidg — device channels: HID gadget nodes and host-side hidapi paths.

Both channels move one whole report per call and fail on short transfers.
"""

import logging
import os
import select
from pathlib import Path

from hidg.protocol import check_read, check_write

logger = logging.getLogger(__name__)

DEV_DIR = Path("/dev")


def device_path(target):
    """Resolve a device argument to an absolute path.

    An integer N (or a string of digits) means /dev/hidgN, a relative
    name is taken under /dev, and an absolute path is used as is.
    """
    if isinstance(target, int) or (isinstance(target, str) and target.isdigit()):
        return DEV_DIR / f"hidg{int(target)}"
    path = Path(target)
    if path.is_absolute():
        return path
    return DEV_DIR / path


# ── Gadget side (/dev/hidgN) ─────────────────────────────────────────────
class GadgetDevice:
    """HID gadget character device.

    Input reports are written to the host; output reports are read from it.
    """

    def __init__(self, cls, path):
        self.cls = cls
        self.path = device_path(path)
        try:
            fd = os.open(self.path, os.O_RDWR)
        except OSError as e:
            raise RuntimeError(
                f"Cannot open HID gadget {self.path}: {e}\n"
                "  Check that the gadget is bound and the node is writable."
            ) from e
        self._file = os.fdopen(fd, "r+b", buffering=0)
        logger.debug("Opened %s gadget at %s", cls, self.path)

    def send(self, report):
        """Write one input report."""
        raw = bytes(report)
        n = self._file.write(raw)
        if n != len(raw):
            logger.debug("Short write to %s: %s of %d bytes", self.path, n, len(raw))
        check_write(n, len(raw))

    def receive(self):
        """Read one output report."""
        report = self.cls.output()
        size = report.SIZE
        raw = self._file.read(size) if size else b""
        if len(raw or b"") != size:
            logger.debug("Short read from %s: %d of %d bytes", self.path, len(raw or b""), size)
        check_read(len(raw or b""), size)
        return type(report).from_bytes(raw)

    def poll(self):
        """Drain pending output reports without blocking.

        Returns the most recent one, or None when nothing was pending.
        """
        report = self.cls.output()
        size = report.SIZE
        if not size:
            return None
        latest = None
        while select.select([self._file], [], [], 0)[0]:
            raw = self._file.read(size)
            if not raw:
                break
            check_read(len(raw), size)
            latest = type(report).from_bytes(raw)
        if latest is not None:
            logger.debug("Output report from %s: %s", self.path, bytes(latest).hex())
        return latest

    def close(self):
        self._file.close()
        logger.debug("Closed %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# ── Host side (hidapi) ───────────────────────────────────────────────────
class HostDevice:
    """A HID device opened by path through hidapi, seen from the host.

    Input reports are read from the device; output reports are written.
    """

    def __init__(self, cls, path, timeout_ms=None):
        import hid

        self.cls = cls
        self.path = path
        self.timeout_ms = timeout_ms
        self._error = hid.HIDException
        raw_path = path.encode() if isinstance(path, str) else path
        try:
            self._dev = hid.Device(path=raw_path)
        except hid.HIDException as e:
            raise RuntimeError(
                f"Cannot open HID device {path}: {e}\n"
                "  Reading input reports usually needs root or a udev rule."
            ) from e
        logger.debug("Opened %s host device at %s", cls, path)

    def receive(self):
        """Read one input report.

        Returns None when a timeout is set and no report arrived.
        """
        report = self.cls.input()
        try:
            data = self._dev.read(report.SIZE, timeout=self.timeout_ms)
        except self._error as e:
            raise RuntimeError(f"Cannot read from HID device {self.path}: {e}") from e
        if not data and self.timeout_ms is not None:
            return None
        check_read(len(data), report.SIZE)
        return type(report).from_bytes(bytes(data))

    def send(self, report):
        """Write one output report.

        hidapi expects the report ID as the first byte; boot reports have
        none, so 0 is prepended and counted in the returned length.
        """
        raw = bytes(report)
        try:
            n = self._dev.write(b"\x00" + raw)
        except self._error as e:
            raise RuntimeError(f"Cannot write to HID device {self.path}: {e}") from e
        check_write(n, len(raw) + 1)

    def close(self):
        self._dev.close()
        logger.debug("Closed %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
