import json
import logging
import os
import time

import cv2

logger = logging.getLogger(__name__)

# thumb, index, middle, ring, pinky chains plus the knuckle line
HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17),
)

GREEN = (94, 197, 34)
RED = (68, 68, 239)
WHITE = (255, 255, 255)
YELLOW = (0, 255, 255)


# ---------- config ----------
class ConfigError(Exception):
    """The config file exists but cannot be used."""


def read_config(path):
    """Parse path as a JSON object. Raises ConfigError when unreadable or not an object."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"{path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be an object, got {type(data).__name__}")
    return data


def load_config(path="config.json"):
    if not os.path.exists(path):
        logger.warning("config '%s' not found, using defaults.", path)
        return {}
    try:
        return read_config(path)
    except ConfigError as e:
        logger.error("Failed to load config, using defaults: %s", e)
        return {}


class ConfigWatcher:
    """
    Polls a JSON config file and re-reads it when its stat signature changes.

    check_reload() hands back the same dict object until a changed file
    parses cleanly, so callers detect a reload by identity. A broken edit is
    logged once and the last good config stays current.
    """

    def __init__(self, path="config.json", min_check_interval=0.5, clock=time.time):
        self.path = path
        self.clock = clock
        self.min_check_interval = min_check_interval  # seconds between stats
        self._cfg = {}
        self._signature = None
        self._next_check = 0.0
        self._refresh()

    def _stat_signature(self):
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return (st.st_mtime_ns, st.st_size)

    def _refresh(self):
        signature = self._stat_signature()
        if signature is None or signature == self._signature:
            return False
        self._signature = signature
        try:
            self._cfg = read_config(self.path)
        except ConfigError as e:
            logger.error("Ignoring broken config edit: %s", e)
            return False
        return True

    def get_config(self):
        return self._cfg

    def check_reload(self):
        now = self.clock()
        if now < self._next_check:
            return self._cfg
        self._next_check = now + self.min_check_interval
        try:
            if self._refresh():
                logger.info("Reloaded %s", self.path)
        except OSError as e:
            logger.error("check_reload error: %s", e)
        return self._cfg


# ---------- debug drawing ----------
def draw_hand(frame, landmarks, color=GREEN):
    """Skeleton + joints for one hand given normalized Points."""
    if frame is None or not landmarks:
        return
    h, w = frame.shape[:2]
    pts = [(int(p.x * w), int(p.y * h)) for p in landmarks]
    for start, end in HAND_CONNECTIONS:
        cv2.line(frame, pts[start], pts[end], color, 3, cv2.LINE_AA)
    for x, y in pts:
        cv2.circle(frame, (x, y), 4, (17, 17, 17), -1, cv2.LINE_AA)
        cv2.circle(frame, (x, y), 4, WHITE, 1, cv2.LINE_AA)


def _put(frame, text, org, color=WHITE, scale=0.6, thickness=1):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)


def draw_status(frame, hand, workflow=None, actuator=None, fps=None):
    """Text overlay: prediction, target, confirmation, workflow and robot link."""
    x0, y0, dy = 10, 30, 24
    detected = hand.letter.value if hand.letter.value != "?" else "-"
    lines = [
        (f"Detected: {detected}", WHITE),
        (
            "Correct!" if hand.is_correct else f"Show {hand.target.value}",
            GREEN if hand.is_correct else RED,
        ),
        (f"Confirmation: {hand.confirmation_count} / {hand.confirm_frames}", WHITE),
    ]
    if workflow is not None:
        letter = workflow.selected_letter.value if workflow.selected_letter else "-"
        lines.append((f"Workflow: {workflow.state.value} ({letter})", YELLOW))
        lines.append((f"Hold: {workflow.success_progress:.0f}%", YELLOW))
    if actuator is not None:
        if not actuator.is_supported:
            link = "Robot: serial not available"
        elif actuator.is_connected:
            link = f"Robot: connected (last sent {actuator.last_sent or '-'})"
        else:
            link = "Robot: not connected"
        lines.append((link, WHITE))
    if fps is not None:
        lines.append((f"FPS: {fps:.1f}", WHITE))

    for i, (text, color) in enumerate(lines):
        _put(frame, text, (x0, y0 + i * dy), color)


def draw_error(frame, error):
    if error:
        _put(frame, error, (10, frame.shape[0] - 20), RED, scale=0.7, thickness=2)


def draw_metrics(frame, metrics, offset_y=220):
    """Debug panel with the classifier measurements."""
    if not metrics:
        return
    fingers = metrics["fingers"]
    d = metrics["distances"]
    a = metrics["angles"]
    lines = [
        "fingers T%d I%d M%d R%d P%d" % (
            fingers["thumb"], fingers["index"], fingers["middle"], fingers["ring"], fingers["pinky"]
        ),
        f"palm_w: {metrics['palm_width']:.3f}",
        f"thumb->idxMCP: {d['thumb_to_index_mcp']:.2f}",
        f"idx<->mid tips: {d['index_to_middle_tips']:.2f}",
        f"thumb->pinky: {d['thumb_to_pinky_tip']:.2f}",
        f"thumb spread: {d['thumb_spread']:.2f}",
        f"ang idx/thumb: {a['index_thumb']:.0f}  idx/mid: {a['index_middle']:.0f}",
    ]
    for i, text in enumerate(lines):
        _put(frame, text, (10, offset_y + i * 20), YELLOW, scale=0.5)
