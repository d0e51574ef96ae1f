import logging

from helping_hand.Geometry import to_points
from helping_hand.HandData import HandData
from helping_hand.LetterClassifier import Letter, LetterClassifier
from helping_hand.Stabilizer import TemporalStabilizer

logger = logging.getLogger(__name__)

NUM_LANDMARKS = 21
DEFAULT_WINDOW = 5
DEFAULT_CONFIRM_FRAMES = 1


class LetterRecognizer:
    """
    Landmarks -> classifier -> stabilizer, with the current target letter.

    Frames without a hand (or with a malformed landmark list) skip the
    classifier but still push UNKNOWN into the smoothing window, so a held
    confirmation decays once the hand leaves the picture.
    """

    def __init__(self, cfg=None):
        cfg = cfg or {}
        s = cfg.get("smoothing", {})
        self.classifier = LetterClassifier(cfg)
        self.stabilizer = TemporalStabilizer(
            window=s.get("window", DEFAULT_WINDOW),
            confirm_frames=s.get("confirm_frames", DEFAULT_CONFIRM_FRAMES),
        )
        self.target = Letter.parse_target(cfg.get("target", "A"))
        self._sent = False
        self._last_timestamp = None

    def update_config(self, cfg):
        """Push cfg into classifier and stabilizer; returns False if either section was rejected."""
        if not cfg:
            return False
        classifier_ok = self.classifier.update_config(cfg)
        try:
            s = cfg.get("smoothing") or {}
            window = int(s.get("window", DEFAULT_WINDOW))
            confirm_frames = int(s.get("confirm_frames", DEFAULT_CONFIRM_FRAMES))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Rejected smoothing config, keeping previous: %s", e)
            return False
        self.stabilizer.configure(window=window, confirm_frames=confirm_frames)
        return classifier_ok

    def change_target(self, letter):
        """Switch the letter to match against; clears latch, streak and sent flag."""
        self.target = Letter.parse_target(letter)
        self.classifier.reset_state()
        self.stabilizer.reset_confirmation()
        self._sent = False
        logger.debug("Target letter -> %s", self.target.value)
        return self.target

    def _classify(self, landmarks):
        if landmarks is None:
            return None, None
        try:
            if len(landmarks) != NUM_LANDMARKS:
                logger.debug("Skipping frame with %d landmarks", len(landmarks))
                return None, None
            points = to_points(landmarks)
            return self.classifier.classify(points), points
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            logger.warning("Malformed landmarks, no prediction this frame: %s", e)
            return None, None

    def process(self, landmarks, timestamp=None):
        hand = HandData()
        if timestamp is not None:
            hand.timestamp = timestamp
        if timestamp is not None and self._last_timestamp is not None:
            hand.dt = timestamp - self._last_timestamp
        self._last_timestamp = timestamp

        raw, points = self._classify(landmarks)
        if raw is not None:
            hand.landmarks = points
            hand.visible = True
            hand.raw_letter = raw
            hand.metrics = self.classifier.metrics(points)

        smoothed, count, correct = self.stabilizer.update(
            raw if raw is not None else Letter.UNKNOWN, self.target
        )
        if not correct:
            self._sent = False

        hand.letter = smoothed
        hand.target = self.target
        hand.confirmation_count = count
        hand.confirm_frames = self.stabilizer.confirm_frames
        hand.is_correct = correct
        return hand

    @property
    def is_correct(self):
        return self.stabilizer.is_correct

    def needs_to_send(self):
        """True once per confirmation streak (free practice mode)."""
        return self.stabilizer.is_correct and not self._sent

    def mark_sent(self):
        self._sent = True
