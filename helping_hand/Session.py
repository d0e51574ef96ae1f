import logging

from helping_hand.LearningWorkflow import LearningWorkflow
from helping_hand.LetterClassifier import Letter
from helping_hand.Recognizer import LetterRecognizer

logger = logging.getLogger(__name__)

MODES = ("practice", "free")

ESC = 27
LETTER_KEYS = {ord(l.value.lower()): l for l in Letter.targets()}
LETTER_KEYS.update({ord(l.value): l for l in Letter.targets()})


class TrainerSession:
    """
    Owns every piece of mutable core state. All calls must come from the
    single event thread; nothing here is safe to share across threads.

    practice: guided demo/practice workflow, the workflow drives the robot.
    free:     pick a target, the robot signs it each time the user confirms it.
    """

    def __init__(self, cfg, actuator, publisher=None, mode="practice", clock=None):
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        self.mode = mode
        self.actuator = actuator
        self.publisher = publisher
        self.recognizer = LetterRecognizer(cfg)
        workflow_kwargs = {} if clock is None else {"clock": clock}
        self.workflow = LearningWorkflow(
            actuator.send,
            cfg,
            on_target_change=self.recognizer.change_target,
            **workflow_kwargs,
        )
        self.last_hand = None
        self.tracking_error = None

    @property
    def error(self):
        return self.tracking_error or self.actuator.error

    def dismiss_error(self):
        self.tracking_error = None
        self.actuator.error = None

    def update_config(self, cfg):
        """Hot-reload entry point. Never raises on bad values; rejected sections keep their settings."""
        recognizer_ok = self.recognizer.update_config(cfg)
        workflow_ok = self.workflow.update_config(cfg)
        if recognizer_ok and workflow_ok:
            logger.info("Config applied")
        return recognizer_ok and workflow_ok

    def handle_frame(self, landmarks, timestamp=None, fps=None):
        hand = self.recognizer.process(landmarks, timestamp)
        self.last_hand = hand

        if self.mode == "practice":
            self.workflow.observe(hand.is_correct)
            self.workflow.poll()
        elif self.recognizer.needs_to_send():
            self.actuator.send(self.recognizer.target.value)
            self.recognizer.mark_sent()

        if self.publisher is not None:
            self.publisher.publish(
                hand,
                workflow=self.workflow if self.mode == "practice" else None,
                actuator=self.actuator,
                fps=fps,
            )
        return hand

    def tick(self):
        """Advance timers when no frame arrived."""
        if self.mode == "practice":
            self.workflow.poll()

    def select_letter(self, letter):
        if self.mode == "practice":
            self.workflow.select_letter(letter)
        else:
            self.recognizer.change_target(letter)

    def handle_key(self, key):
        """Returns False when the user asked to quit."""
        if key < 0 or key == 255:
            return True
        if key == ESC or key == ord("q"):
            return False
        if key in LETTER_KEYS:
            self.select_letter(LETTER_KEYS[key])
        elif key == ord("r"):
            self.workflow.retry()
        elif key == ord("x"):
            self.workflow.reset()
        elif key == ord("c"):
            if self.actuator.is_connected:
                self.actuator.disconnect()
            else:
                self.actuator.connect()
        elif key == ord("e"):
            self.dismiss_error()
        return True

    def shutdown(self):
        self.workflow.shutdown()
        self.actuator.disconnect()
        if self.publisher is not None:
            self.publisher.close()
        logger.info("Session closed")
