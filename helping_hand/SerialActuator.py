import logging
import threading

import serial
from serial.tools import list_ports

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 92600


# ==========================================
# ROBOT HAND LINK (one ASCII letter per command)
# ==========================================
class SerialActuator:
    def __init__(self, cfg=None):
        scfg = (cfg or {}).get("serial", {})
        self.port_name = scfg.get("port")
        self.baudrate = scfg.get("baudrate", DEFAULT_BAUDRATE)
        self.timeout = scfg.get("timeout", 0.1)
        self.description_hint = scfg.get("description_hint", "Arduino")

        self.conn = None
        self.last_sent = ""
        self.error = None
        self._lock = threading.Lock()
        # false only when the importable `serial` module is not pyserial
        self.is_supported = hasattr(serial, "Serial")

    @staticmethod
    def _available_ports():
        try:
            return list(list_ports.comports())
        except OSError as e:
            logger.warning("Could not enumerate serial ports: %s", e)
            return []

    def _pick_port(self):
        if self.port_name:
            return self.port_name
        ports = self._available_ports()
        for port in ports:
            if self.description_hint and self.description_hint.lower() in (port.description or "").lower():
                return port.device
        return ports[0].device if ports else None

    @property
    def is_connected(self):
        return self.conn is not None

    def connect(self):
        if not self.is_supported:
            self.error = "No serial transport available on this host."
            logger.error(self.error)
            return False
        if self.conn is not None:
            return True

        device = self._pick_port()
        if device is None:
            self.error = "Failed to connect. Check cable and permissions."
            logger.error("No serial port found (hint %r)", self.description_hint)
            return False

        with self._lock:
            try:
                self.error = None
                self.conn = serial.Serial(device, self.baudrate, timeout=self.timeout)
                logger.info("Connected to %s @ %d baud", device, self.baudrate)
                return True
            except (serial.SerialException, OSError, ValueError) as e:
                logger.error("Serial connection error: %s", e)
                self.error = "Failed to connect. Check cable and permissions."
                self.conn = None
                return False

    def disconnect(self):
        with self._lock:
            self._close_locked()

    def _close_locked(self):
        if self.conn is None:
            return
        try:
            self.conn.close()
        except (serial.SerialException, OSError) as e:
            logger.error("Disconnect error: %s", e)
        finally:
            self.conn = None
            logger.info("Serial disconnected")

    def send(self, letter):
        """Write a single ASCII character. A failed write drops the link."""
        if len(letter) != 1 or not letter.isascii():
            raise ValueError(f"Expected one ASCII character, got {letter!r}")

        with self._lock:
            if self.conn is None:
                logger.warning("Cannot send %r: not connected", letter)
                return False
            try:
                self.conn.write(letter.encode("ascii"))
                self.last_sent = letter
                logger.debug("Sent %r", letter)
                return True
            except (serial.SerialException, OSError) as e:
                logger.error("Send error: %s", e)
                self.error = "Send failed. Connection lost."
                self._close_locked()
                return False
