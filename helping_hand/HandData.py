from helping_hand.LetterClassifier import Letter


class HandData:
    """
    Simple container for one processed frame that flows between modules.
    """

    def __init__(self):
        # list of Point(x, y), or None when no hand was found
        self.landmarks = None

        # boolean flag
        self.visible = False

        # timing
        self.timestamp = None  # absolute time (seconds), None when the frame had none
        self.dt = 0.0  # time since previous processed frame (seconds)

        # classification result
        self.raw_letter = None  # None when the classifier did not run
        self.letter = Letter.UNKNOWN  # majority-smoothed
        self.target = Letter.A
        self.confirmation_count = 0
        self.confirm_frames = 1
        self.is_correct = False

        # measurements behind the decision (see LetterClassifier.metrics)
        self.metrics = None

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        return {
            "visible": self.visible,
            "landmarks": (
                [[p.x, p.y] for p in self.landmarks] if self.landmarks else None
            ),
            "raw_letter": self.raw_letter.value if self.raw_letter else None,
            "letter": self.letter.value,
            "target": self.target.value,
            "confirmation_count": self.confirmation_count,
            "confirm_frames": self.confirm_frames,
            "is_correct": self.is_correct,
            "metrics": self.metrics,
            "timestamp": self.timestamp,
            "dt": self.dt,
        }
