from collections import Counter, deque

from helping_hand.LetterClassifier import Letter


class TemporalStabilizer:
    """
    Majority vote over the last `window` raw labels plus a confirmation
    streak against the current target letter.
    """

    def __init__(self, window=5, confirm_frames=1):
        self.window = max(1, int(window))
        self.confirm_frames = max(1, int(confirm_frames))
        self._history = deque(maxlen=self.window)
        self._streak = 0
        self._smoothed = Letter.UNKNOWN
        self._is_correct = False

    def configure(self, window=None, confirm_frames=None):
        if window is not None and int(window) != self.window:
            self.window = max(1, int(window))
            self._history = deque(self._history, maxlen=self.window)
        if confirm_frames is not None:
            self.confirm_frames = max(1, int(confirm_frames))

    @property
    def history(self):
        return tuple(self._history)

    @property
    def smoothed(self):
        return self._smoothed

    @property
    def streak(self):
        return self._streak

    @property
    def confirmation_count(self):
        return min(self._streak, self.confirm_frames)

    @property
    def is_correct(self):
        return self._is_correct

    @staticmethod
    def majority(history):
        # Counter keeps first-seen order, so ties go to the oldest label
        if not history:
            return Letter.UNKNOWN
        label, _votes = Counter(history).most_common(1)[0]
        return label

    def update(self, label, target):
        """Push one raw label; returns (smoothed, confirmation_count, is_correct)."""
        self._history.append(label)
        self._smoothed = self.majority(self._history)

        if target is not None and self._smoothed == target:
            self._streak = min(self._streak + 1, self.confirm_frames)
            self._is_correct = self._streak >= self.confirm_frames
        else:
            self._streak = 0
            self._is_correct = False
        return self._smoothed, self.confirmation_count, self._is_correct

    def reset_confirmation(self):
        self._streak = 0
        self._is_correct = False

    def clear(self):
        self._history.clear()
        self._smoothed = Letter.UNKNOWN
        self.reset_confirmation()
