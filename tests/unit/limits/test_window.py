from ratelimiter.limits.domain.services.window import window_index, window_reset_epoch, window_start_epoch


def test_window_index_is_epoch_aligned():
    assert window_index(0, 60) == 0
    assert window_index(59.999, 60) == 0
    assert window_index(60, 60) == 1
    assert window_index(1_000, 30) == 33


def test_same_window_until_boundary():
    assert window_index(120, 60) == window_index(179, 60) == 2
    assert window_index(180, 60) == 3


def test_reset_is_start_of_next_window():
    idx = window_index(1_000, 30)
    assert window_start_epoch(idx, 30) == 990
    assert window_reset_epoch(idx, 30) == 1_020
