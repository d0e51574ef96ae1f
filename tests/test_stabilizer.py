from helping_hand.LetterClassifier import Letter
from helping_hand.Stabilizer import TemporalStabilizer

A, I, L, V, U = Letter.A, Letter.I, Letter.L, Letter.V, Letter.UNKNOWN


def feed(stab, labels, target):
    result = None
    for label in labels:
        result = stab.update(label, target)
    return result


def test_majority_over_full_window():
    stab = TemporalStabilizer(window=5)
    smoothed, _, _ = feed(stab, [A, A, I, A, I], target=L)
    assert smoothed is A


def test_window_evicts_oldest():
    stab = TemporalStabilizer(window=5)
    feed(stab, [A, A, A, I, I, I], target=L)
    assert stab.history == (A, A, I, I, I)
    assert stab.smoothed is I


def test_ties_go_to_first_seen_label():
    assert TemporalStabilizer.majority([I, A, A, I]) is I
    assert TemporalStabilizer.majority([U, V, V, U, L]) is U
    assert TemporalStabilizer.majority([]) is U


def test_single_frame_confirmation_by_default():
    stab = TemporalStabilizer()
    assert stab.update(A, A) == (A, 1, True)
    assert stab.is_correct


def test_mismatch_resets_streak():
    stab = TemporalStabilizer(window=1, confirm_frames=3)
    feed(stab, [A, A], target=A)
    assert stab.streak == 2 and not stab.is_correct
    stab.update(I, A)
    assert stab.streak == 0
    assert stab.confirmation_count == 0


def test_streak_saturates_at_threshold():
    stab = TemporalStabilizer(window=1, confirm_frames=3)
    smoothed, count, correct = feed(stab, [A] * 6, target=A)
    assert (smoothed, count, correct) == (A, 3, True)
    assert stab.streak == 3


def test_confirmation_follows_smoothed_not_raw_label():
    stab = TemporalStabilizer(window=5)
    feed(stab, [A, A, A], target=A)
    # one stray frame does not flip a 3-vote majority
    assert stab.update(I, A) == (A, 1, True)


def test_reset_confirmation_is_immediate_and_keeps_window():
    stab = TemporalStabilizer(window=5, confirm_frames=2)
    feed(stab, [A, A, A], target=A)
    assert stab.is_correct

    stab.reset_confirmation()
    assert not stab.is_correct
    assert stab.streak == 0
    assert stab.history == (A, A, A)


def test_no_target_never_confirms():
    stab = TemporalStabilizer()
    assert stab.update(A, None) == (A, 0, False)


def test_configure_resizes_window_keeping_newest():
    stab = TemporalStabilizer(window=5)
    feed(stab, [A, I, L, V, V], target=None)
    stab.configure(window=3, confirm_frames=2)
    assert stab.history == (L, V, V)
    assert stab.confirm_frames == 2


def test_clear():
    stab = TemporalStabilizer()
    feed(stab, [A, A], target=A)
    stab.clear()
    assert stab.history == ()
    assert stab.smoothed is U
    assert not stab.is_correct
