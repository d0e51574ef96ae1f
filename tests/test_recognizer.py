import pytest

from helping_hand.LetterClassifier import Letter
from helping_hand.Recognizer import LetterRecognizer


def test_process_confirms_target(letter_hand):
    rec = LetterRecognizer()
    hand = rec.process(letter_hand("A"), timestamp=1.0)
    assert hand.visible
    assert hand.raw_letter is Letter.A
    assert hand.letter is Letter.A
    assert hand.is_correct
    assert hand.metrics["fingers"]["thumb"] == 1


def test_absent_hand_pushes_unknown_and_clears_metrics(letter_hand):
    rec = LetterRecognizer({"smoothing": {"window": 3}})
    rec.process(letter_hand("A"))
    hand = rec.process(None)
    assert hand.landmarks is None
    assert hand.metrics is None
    assert hand.raw_letter is None
    assert rec.stabilizer.history == (Letter.A, Letter.UNKNOWN)
    # tie between A and UNKNOWN goes to A, so the confirmation survives one frame
    assert hand.is_correct

    hand = rec.process(None)
    assert hand.letter is Letter.UNKNOWN
    assert not hand.is_correct


@pytest.mark.parametrize("bad", [[], [(0.5, 0.5)] * 20, [(0.5, 0.5)] * 20 + ["junk"], 42])
def test_malformed_landmarks_degrade_to_no_prediction(bad):
    rec = LetterRecognizer()
    hand = rec.process(bad)
    assert hand.raw_letter is None
    assert not hand.visible
    assert hand.letter is Letter.UNKNOWN


def test_change_target_resets_confirmation_before_next_frame(letter_hand):
    rec = LetterRecognizer()
    rec.process(letter_hand("A"))
    assert rec.is_correct

    rec.change_target("L")
    assert rec.target is Letter.L
    assert not rec.is_correct
    assert rec.stabilizer.streak == 0


def test_change_target_clears_v_latch(letter_hand, make_v_hand):
    rec = LetterRecognizer()
    rec.change_target("V")
    rec.process(letter_hand("V"))
    assert rec.classifier.v_latch

    rec.change_target("V")
    assert not rec.classifier.v_latch
    assert rec.process(make_v_hand(0.027)).raw_letter is Letter.UNKNOWN


def test_change_target_rejects_unknown_letters():
    with pytest.raises(ValueError):
        LetterRecognizer().change_target("Q")


def test_needs_to_send_once_per_streak(letter_hand):
    rec = LetterRecognizer({"smoothing": {"window": 1}})
    rec.change_target("Y")

    rec.process(letter_hand("Y"))
    assert rec.needs_to_send()
    rec.mark_sent()
    rec.process(letter_hand("Y"))
    assert not rec.needs_to_send()

    rec.process(letter_hand("I"))
    rec.process(letter_hand("Y"))
    assert rec.needs_to_send()


def test_dt_between_frames(letter_hand):
    rec = LetterRecognizer()
    rec.process(letter_hand("A"), timestamp=10.0)
    assert rec.process(letter_hand("A"), timestamp=10.25).dt == pytest.approx(0.25)


def test_to_dict_is_json_friendly(letter_hand):
    import json

    hand = LetterRecognizer().process(letter_hand("L"))
    data = json.loads(json.dumps(hand.to_dict()))
    assert data["raw_letter"] == "L"
    assert data["target"] == "A"
    assert len(data["landmarks"]) == 21


def test_zero_timestamp_is_kept(letter_hand):
    rec = LetterRecognizer()
    assert rec.process(letter_hand("A")).timestamp is None
    hand = rec.process(letter_hand("A"), timestamp=0.0)
    assert hand.timestamp == 0.0
    assert hand.to_dict()["timestamp"] == 0.0
    assert rec.process(letter_hand("A"), timestamp=0.5).dt == pytest.approx(0.5)


def test_bad_smoothing_keeps_previous_window():
    rec = LetterRecognizer({"smoothing": {"window": 3, "confirm_frames": 2}})
    assert rec.update_config({"smoothing": {"window": "five"}}) is False
    assert rec.stabilizer.window == 3
    assert rec.stabilizer.confirm_frames == 2
