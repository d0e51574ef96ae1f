import mediapipe as mp

from helping_hand.Geometry import Point


class HandTracker:
    """MediaPipe Hands wrapper returning 21 Point(x, y) for the first hand."""

    def __init__(self, cfg):
        tcfg = cfg.get("tracker", {})
        self.mp_hands = mp.solutions.hands.Hands(
            model_complexity=tcfg.get("model_complexity", 1),
            min_detection_confidence=tcfg.get("min_detection_confidence", 0.6),
            min_tracking_confidence=tcfg.get("min_tracking_confidence", 0.6),
            max_num_hands=1,
        )

    def process_frame(self, frame_rgb):
        """
        frame_rgb: RGB uint8 image (caller converts from BGR).
        Returns a list of 21 Points, or None when no hand is visible.
        """
        result = self.mp_hands.process(frame_rgb)
        if not result.multi_hand_landmarks:
            return None
        return [Point(lm.x, lm.y) for lm in result.multi_hand_landmarks[0].landmark]

    def close(self):
        self.mp_hands.close()
