import logging
import time
from enum import Enum

from helping_hand.LetterClassifier import Letter

logger = logging.getLogger(__name__)

# phase durations (ms)
WORKFLOW_DEFAULTS = {
    "demo_ms": 3000,
    "reset_ms": 1000,
    "success_ms": 3000,
    "practice_timeout_ms": 8000,
}


class WorkflowState(str, Enum):
    IDLE = "idle"  # no letter selected
    DEMO_SIGNING = "demo_signing"  # robot is signing the letter
    DEMO_RESETTING = "demo_resetting"  # robot is resetting to 'A'
    USER_PRACTICE = "user_practice"  # user's turn
    SUCCESS = "success"
    TIMEOUT = "timeout"


class TimerHandle:
    """A pending deadline owned by the workflow. Cancelled handles never fire."""

    def __init__(self, kind, start_ms, duration_ms):
        self.kind = kind
        self.start_ms = start_ms
        self.deadline_ms = start_ms + duration_ms
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def due(self, now_ms):
        return not self.cancelled and now_ms >= self.deadline_ms

    def __repr__(self):
        return f"TimerHandle({self.kind!r}, deadline={self.deadline_ms})"


class LearningWorkflow:
    """
    Demo -> reset -> practice -> success/timeout cycle for one target letter.

    Not thread safe: the owner calls every method from one thread. Timers
    advance only inside poll() (and observe()), which the host calls at
    least ten times a second.
    """

    def __init__(self, send_letter, cfg=None, clock=time.monotonic, on_target_change=None):
        self.send_letter = send_letter
        self.on_target_change = on_target_change
        self.clock = clock

        self._apply(self._parse({}))
        self.update_config(cfg)

        self.state = WorkflowState.IDLE
        self.selected_letter = None
        self.success_progress = 0.0

        # at most one of demo/reset/timeout is pending, plus the success ticker
        self._phase_timer = None
        self._success_timer = None

    @staticmethod
    def _parse(w):
        timings = {}
        for key, default in WORKFLOW_DEFAULTS.items():
            timings[key] = int(w.get(key, default))
        timings["success_ms"] = max(1, timings["success_ms"])
        timings["reset_letter"] = Letter.parse_target(w.get("reset_letter", Letter.A))
        return timings

    def _apply(self, parsed):
        self.demo_ms = parsed["demo_ms"]
        self.reset_ms = parsed["reset_ms"]
        self.success_ms = parsed["success_ms"]
        self.practice_timeout_ms = parsed["practice_timeout_ms"]
        self.reset_letter = parsed["reset_letter"]

    def update_config(self, cfg):
        """Apply cfg["workflow"] all at once; a bad value keeps every current setting."""
        if not cfg:
            return False
        try:
            parsed = self._parse(cfg.get("workflow") or {})
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Rejected workflow config, keeping previous: %s", e)
            return False
        self._apply(parsed)
        return True

    def _now_ms(self):
        return int(round(self.clock() * 1000))

    @property
    def pending_timers(self):
        return [t for t in (self._phase_timer, self._success_timer) if t is not None]

    # ---------- user actions ----------
    def select_letter(self, letter):
        letter = Letter.parse_target(letter)
        self.cancel_timers()
        self.selected_letter = letter
        if self.on_target_change is not None:
            self.on_target_change(letter)
        logger.info("Starting demo for %s", letter.value)
        self._enter(WorkflowState.DEMO_SIGNING)

    def retry(self):
        if self.selected_letter is None:
            logger.debug("Retry ignored: no letter selected")
            return
        self.select_letter(self.selected_letter)

    def reset(self):
        self.cancel_timers()
        self.state = WorkflowState.IDLE
        self.selected_letter = None

    def shutdown(self):
        self.cancel_timers()

    def cancel_timers(self):
        for timer in self.pending_timers:
            timer.cancel()
        self._phase_timer = None
        self._success_timer = None
        self.success_progress = 0.0

    # ---------- transitions ----------
    def _arm(self, kind, duration_ms, start_ms):
        self._phase_timer = TimerHandle(kind, start_ms, duration_ms)

    def _enter(self, state, at_ms=None):
        # chained phases start from the deadline that fired, not the poll time
        start_ms = self._now_ms() if at_ms is None else at_ms
        logger.debug("Workflow %s -> %s", self.state.value, state.value)
        self.state = state
        if state is WorkflowState.DEMO_SIGNING:
            self._send(self.selected_letter)
            self._arm("demo", self.demo_ms, start_ms)
        elif state is WorkflowState.DEMO_RESETTING:
            self._send(self.reset_letter)
            self._arm("reset", self.reset_ms, start_ms)
        elif state is WorkflowState.USER_PRACTICE:
            self.success_progress = 0.0
            self._arm("timeout", self.practice_timeout_ms, start_ms)
        elif state is WorkflowState.SUCCESS:
            logger.info("Success: %s held for %d ms", self.selected_letter.value, self.success_ms)
        elif state is WorkflowState.TIMEOUT:
            logger.info("Practice timed out for %s", self.selected_letter.value)

    def _send(self, letter):
        # fire and forget: failures are reported by the actuator itself
        ok = self.send_letter(letter.value)
        if not ok:
            logger.debug("Actuator did not accept %r", letter.value)

    def _cancel_success(self):
        if self._success_timer is not None:
            self._success_timer.cancel()
            self._success_timer = None
        self.success_progress = 0.0

    def observe(self, is_correct):
        """Feed the stabilizer's correctness signal for this frame."""
        if self.state is not WorkflowState.USER_PRACTICE:
            return
        if is_correct:
            if self._success_timer is None:
                self._success_timer = TimerHandle("success", self._now_ms(), self.success_ms)
        else:
            self._cancel_success()
        self.poll()

    def poll(self):
        """Fire every due timer, earliest deadline first."""
        now = self._now_ms()
        while True:
            due = [t for t in self.pending_timers if t.due(now)]
            if self._success_timer is not None and not self._success_timer.cancelled:
                elapsed = now - self._success_timer.start_ms
                self.success_progress = min(elapsed / self.success_ms * 100.0, 100.0)
            if not due:
                return
            self._fire(min(due, key=lambda t: t.deadline_ms))

    def _fire(self, timer):
        if timer is self._success_timer:
            self._success_timer = None
            self.success_progress = 100.0
            if self._phase_timer is not None:
                self._phase_timer.cancel()
                self._phase_timer = None
            self._enter(WorkflowState.SUCCESS)
            return

        self._phase_timer = None
        if timer.kind == "demo":
            self._enter(WorkflowState.DEMO_RESETTING, at_ms=timer.deadline_ms)
        elif timer.kind == "reset":
            self._enter(WorkflowState.USER_PRACTICE, at_ms=timer.deadline_ms)
        elif timer.kind == "timeout":
            self._cancel_success()
            self._enter(WorkflowState.TIMEOUT, at_ms=timer.deadline_ms)
