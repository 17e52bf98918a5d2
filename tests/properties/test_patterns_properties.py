"""Property-based tests for path classification."""

from hypothesis import given, strategies as st

from respawn.watch import Classification, classify, compile_patterns

segment = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJ_-."),
    min_size=1,
    max_size=8,
).filter(lambda s: s not in {".", ".."})

paths = st.lists(segment, min_size=1, max_size=5)


@given(segments=paths, data=st.data())
def test_ignore_wins_over_live(segments: list[str], data: st.DataObject) -> None:
    """Property: a path matched by both pattern sets is ignored."""
    pattern = data.draw(st.sampled_from(segments))
    matcher = compile_patterns([pattern])

    assert classify("/".join(segments), matcher, matcher) is Classification.IGNORED


@given(segments=paths, pattern=segment)
def test_literal_pattern_matches_whole_segments(
    segments: list[str], pattern: str
) -> None:
    """Property: a literal pattern matches exactly when a segment equals it."""
    matcher = compile_patterns([pattern])

    expected = pattern.lower() in {s.lower() for s in segments}

    assert matcher.matches("/".join(segments)) is expected


@given(segments=paths)
def test_no_patterns_means_restart(segments: list[str]) -> None:
    """Property: with nothing configured every change restarts the child."""
    empty = compile_patterns([])

    assert classify("/".join(segments), empty, empty) is Classification.RESTART
