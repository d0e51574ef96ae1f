import logging
from enum import Enum

from helping_hand.Geometry import (
    fingers_up,
    normalized_distance,
    palm_width,
    rays_angle,
    angle_at_pip,
    thumb_spread_normalized,
)

logger = logging.getLogger(__name__)

# (base, tip) landmark pairs used as direction rays
INDEX_RAY = (5, 8)
MIDDLE_RAY = (9, 12)
THUMB_RAY = (2, 4)


class Letter(str, Enum):
    A = "A"
    I = "I"
    L = "L"
    V = "V"
    Y = "Y"
    UNKNOWN = "?"

    @classmethod
    def targets(cls):
        return (cls.A, cls.I, cls.L, cls.V, cls.Y)

    @classmethod
    def parse_target(cls, value):
        """Accepts 'a', 'A' or Letter.A; raises ValueError for anything else."""
        try:
            letter = cls(str(getattr(value, "value", value)).upper())
        except ValueError:
            raise ValueError(f"Unsupported target letter: {value!r}") from None
        if letter is cls.UNKNOWN:
            raise ValueError("UNKNOWN cannot be a target letter")
        return letter


DEFAULT_THRESHOLDS = {
    # thumb counts as "out" when its tip is this far (raw x) from its MCP
    "thumbSpread": 0.035,
    # A: fist with thumb outside along index
    "A_thumbAwayFromIndexMCP": 0.55,
    # I: pinky up only, thumb folded
    "I_pinkyUpGap": 0.05,
    # L: index up + thumb out at roughly a right angle
    "L_requiredAngleMinDeg": 25.0,
    "L_requiredAngleMaxDeg": 100.0,
    "L_minThumbSpread": 0.035,
    "L_indexStraightDeg": 150.0,
    "L_otherBentTol": 0.62,
    # V: index & middle up with separated tips and a visible angle
    "V_sepMin": 0.24,
    "V_angleMinDeg": 16.0,
    "V_hyst": 0.02,
    "V_angleHystDeg": 3.0,
    # Y (shaka): thumb + pinky out
    "Y_thumbSpread": 0.035,
    "Y_spanMin": 0.35,
}


class LetterClassifier:
    """
    Rule-based classifier for the static letters A, I, L, V, Y.

    Each letter is a coarse finger up/down shape followed by a metric or
    angle check. Rules are tried in a fixed order and the first match wins.
    The only state carried between frames is the V hysteresis latch.
    """

    def __init__(self, cfg=None):
        self.cfg = {"classifier": {"thresholds": dict(DEFAULT_THRESHOLDS)}}
        self.t = self.cfg["classifier"]["thresholds"]
        self.v_latch = False
        if cfg:
            self.update_config(cfg)

    def update_config(self, cfg):
        """
        Rebuild thresholds from the defaults plus cfg's overrides.
        A section with any unusable value is rejected whole and the current
        thresholds stay in place; returns whether the new section was applied.
        """
        if not cfg:
            return False
        thresholds = dict(DEFAULT_THRESHOLDS)
        try:
            overrides = (cfg.get("classifier") or {}).get("thresholds") or {}
            for key, value in overrides.items():
                if key not in DEFAULT_THRESHOLDS:
                    logger.warning("Ignoring unknown classifier threshold %r", key)
                    continue
                thresholds[key] = float(value)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Rejected classifier thresholds, keeping previous: %s", e)
            return False
        self.cfg["classifier"]["thresholds"] = thresholds
        self.t = thresholds
        return True

    def reset_state(self):
        self.v_latch = False

    def _measure(self, lm):
        pw = palm_width(lm)
        return {
            "pw": pw,
            "fingers": fingers_up(lm, self.t["thumbSpread"]),
            "thumb_to_index_mcp": normalized_distance(lm, 4, 5, pw),
            "index_to_middle_tips": normalized_distance(lm, 8, 12, pw),
            "thumb_to_pinky_tip": normalized_distance(lm, 4, 20, pw),
            "index_thumb_angle": rays_angle(lm, INDEX_RAY, THUMB_RAY),
            "index_middle_angle": rays_angle(lm, INDEX_RAY, MIDDLE_RAY),
        }

    @staticmethod
    def _shapes(fingers):
        thumb, index, middle, ring, pinky = fingers
        return {
            "all_four_down": not (index or middle or ring or pinky),
            "pinky_up_only": bool(pinky) and not (index or middle or ring),
            "two_up_index_middle": bool(index and middle) and not (ring or pinky),
            "l_shape": bool(thumb and index) and not (middle or ring or pinky),
            "y_shape": bool(thumb and pinky) and not (index or middle or ring),
        }

    def classify(self, lm):
        t = self.t
        m = self._measure(lm)
        thumb_out = m["fingers"][0] == 1
        shapes = self._shapes(m["fingers"])

        if (
            shapes["all_four_down"]
            and thumb_out
            and m["thumb_to_index_mcp"] >= t["A_thumbAwayFromIndexMCP"]
        ):
            return Letter.A

        if shapes["pinky_up_only"] and not thumb_out:
            return Letter.I

        if shapes["l_shape"]:
            angle = m["index_thumb_angle"]
            if t["L_requiredAngleMinDeg"] <= angle <= t["L_requiredAngleMaxDeg"]:
                return Letter.L

        if shapes["two_up_index_middle"]:
            sep = m["index_to_middle_tips"]
            angle = m["index_middle_angle"]
            if sep >= t["V_sepMin"] and angle >= t["V_angleMinDeg"]:
                self.v_latch = True
                return Letter.V
            if self.v_latch and (
                sep >= t["V_sepMin"] - t["V_hyst"]
                or angle >= t["V_angleMinDeg"] - t["V_angleHystDeg"]
            ):
                return Letter.V

        if shapes["y_shape"]:
            thumb_ok = thumb_spread_normalized(lm, m["pw"]) > t["Y_thumbSpread"]
            span_ok = m["thumb_to_pinky_tip"] > t["Y_spanMin"]
            if thumb_ok and span_ok:
                return Letter.Y

        return Letter.UNKNOWN

    def metrics(self, lm):
        """Snapshot of the measurements behind classify(), for debugging."""
        m = self._measure(lm)
        thumb, index, middle, ring, pinky = m["fingers"]
        return {
            "palm_width": m["pw"],
            "fingers": {
                "thumb": thumb,
                "index": index,
                "middle": middle,
                "ring": ring,
                "pinky": pinky,
            },
            "distances": {
                "thumb_to_index_mcp": m["thumb_to_index_mcp"],
                "index_to_middle_tips": m["index_to_middle_tips"],
                "thumb_to_pinky_tip": m["thumb_to_pinky_tip"],
                "thumb_spread": thumb_spread_normalized(lm, m["pw"]),
            },
            "angles": {
                "index_thumb": m["index_thumb_angle"],
                "index_middle": m["index_middle_angle"],
                "index_pip": angle_at_pip(lm, 8, 7, 6),
            },
            "shapes": self._shapes(m["fingers"]),
        }
